from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, forced reconfiguration, shutdown and log file
rotation logic.
"""

import logging
import time
from logging.handlers import QueueListener
from pathlib import Path

import pytest

from textcon.infra.logging import LoggingConfig, configure_logging, level_for_verbosity, shutdown_logging
from textcon.infra.logging.core import _CONFIGURED_FLAG_ATTR, _QUEUE_LISTENER_ATTR
from textcon.infra.logging.handlers import _HANDLER_TAG_ATTR, build_sinks, console_sink


@pytest.fixture(autouse=True)
def reset_logging():
    """Clean up root logger handlers before and after each test."""
    root = logging.getLogger()

    def _reset() -> None:
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if listener and isinstance(listener, QueueListener) and getattr(listener, "_thread", None):
            listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

        for h in list(root.handlers):
            if getattr(h, _HANDLER_TAG_ATTR, False):
                root.removeHandler(h)
                h.close()

        if hasattr(root, _CONFIGURED_FLAG_ATTR):
            delattr(root, _CONFIGURED_FLAG_ATTR)

    _reset()
    yield
    _reset()


def _our_handlers() -> list:
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    """Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    initial_handler_count = len(_our_handlers())

    configure_logging(cfg)
    assert len(_our_handlers()) == initial_handler_count, "Handlers were duplicated."


def test_force_replaces_previous_configuration() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    first_listener = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)

    root = configure_logging(LoggingConfig(level="DEBUG"), force=True)

    assert root.level == logging.DEBUG
    assert len(_our_handlers()) == 1
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not first_listener


def test_log_rotation(tmp_path: Path) -> None:
    """Rotation happens when the size limit is exceeded."""
    log_file = tmp_path / "logs" / "textcon.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("textcon.test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)
    shutdown_logging()

    assert log_file.exists()
    assert (tmp_path / "logs" / "textcon.log.1").exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """The root logger feeds a QueueHandler drained by a listener thread."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()

    assert len(_our_handlers()) > 0
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_shutdown_detaches_handlers_and_allows_reconfiguration() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    shutdown_logging()

    root = logging.getLogger()
    assert _our_handlers() == []
    assert getattr(root, _QUEUE_LISTENER_ATTR) is None
    assert getattr(root, _CONFIGURED_FLAG_ATTR) is False

    configure_logging(LoggingConfig(level="INFO"))
    assert len(_our_handlers()) == 1


def test_foreign_handlers_survive_reconfiguration() -> None:
    foreign = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig())
        configure_logging(LoggingConfig(), force=True)
        assert foreign in root.handlers
    finally:
        root.removeHandler(foreign)


@pytest.mark.parametrize(
    "verbose, quiet, expected",
    [(0, False, "WARNING"), (1, False, "INFO"), (2, False, "DEBUG"), (5, False, "DEBUG"), (0, True, "ERROR")],
)
def test_level_for_verbosity(verbose, quiet, expected) -> None:
    assert level_for_verbosity(verbose, quiet) == expected


def test_console_format_follows_verbosity() -> None:
    quiet = console_sink(LoggingConfig(), logging.WARNING)
    debug = console_sink(LoggingConfig(), logging.DEBUG)

    record = logging.LogRecord("textcon.core", logging.WARNING, __file__, 1, "msg", None, None)
    assert quiet.format(record) == "textcon: WARNING: msg"
    assert debug.format(record) == "textcon: WARNING: textcon.core: msg"


def test_file_sink_keeps_info_when_console_is_quiet(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"
    root = configure_logging(LoggingConfig(level="ERROR", console=True, log_file=str(log_file)))

    sinks = build_sinks(LoggingConfig(level="ERROR", log_file=str(tmp_path / "other.log")), logging.ERROR)
    assert [h.level for h in sinks] == [logging.ERROR, logging.INFO]
    for h in sinks:
        h.close()

    assert root.level == logging.INFO
    logging.getLogger("textcon.run").info("expansion finished")
    shutdown_logging()

    assert "expansion finished" in log_file.read_text(encoding="utf-8")


def test_unopenable_log_file_is_skipped(tmp_path: Path, capsys) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    sinks = build_sinks(LoggingConfig(console=False, log_file=str(blocker / "x.log")), logging.INFO)

    assert sinks == []
    assert "cannot open log file" in capsys.readouterr().err
