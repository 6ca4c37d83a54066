from __future__ import annotations

"""
Logging Sinks.

Builds the handlers drained by the queue listener: a stderr console sink
whose format follows the CLI verbosity, and an optional rotating file sink
that keeps INFO records even when the console is quieter. Every sink is
tagged so reconfiguration only removes what this package installed.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from textcon.infra.logging.config import LoggingConfig

_HANDLER_TAG_ATTR: str = "_textcon_handler"

# File sinks never record less than this, whatever the console level
FILE_SINK_CEILING: int = logging.INFO


def _tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))

# ==============================================================================
# SINK FACTORIES
# ==============================================================================

def build_sinks(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    """
    Create the enabled sinks for a configuration.

    Args:
        cfg: Logging configuration.
        level_int: Console threshold derived from the verbosity flags.

    Returns:
        List[logging.Handler]: Tagged handlers, console first. A log file
                               that cannot be opened is reported on stderr
                               and left out.
    """
    sinks: List[logging.Handler] = []
    if cfg.console:
        sinks.append(console_sink(cfg, level_int))
    if cfg.log_file:
        fh = file_sink(cfg, level_int)
        if fh is not None:
            sinks.append(fh)
    return sinks


def console_sink(cfg: LoggingConfig, level_int: int) -> logging.Handler:
    """stderr sink; at DEBUG the records also carry the emitting module."""
    fmt = cfg.debug_console_fmt if level_int <= logging.DEBUG else cfg.console_fmt
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level_int)
    sh.setFormatter(logging.Formatter(fmt))
    return _tag_handler(sh)


def file_sink(cfg: LoggingConfig, level_int: int) -> Optional[RotatingFileHandler]:
    """
    Rotating file sink for --log-file.

    The sink records at the console level or INFO, whichever is more
    verbose, so `-q --log-file run.log` still leaves a run history.
    """
    try:
        parent = os.path.dirname(os.path.abspath(cfg.log_file))
        os.makedirs(parent, exist_ok=True)
        fh = RotatingFileHandler(
            cfg.log_file,
            maxBytes=int(cfg.max_bytes),
            backupCount=int(cfg.backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"textcon: warning: cannot open log file '{cfg.log_file}': {e}\n")
        return None

    fh.setLevel(min(level_int, FILE_SINK_CEILING))
    fh.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
    return _tag_handler(fh)
