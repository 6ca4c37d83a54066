from __future__ import annotations

"""
Unit tests for the Size-Checked File Loading Component.

Verifies the size ceiling and force override, exact byte preservation,
permissive decoding and error mapping.
"""

import errno
import os
from pathlib import Path

import pytest

from textcon.core.pipeline.components import reader as reader_module
from textcon.core.pipeline.components.reader import check_size, load_file, read_text
from textcon.domain.errors import FileNotFoundInBaseError, FileTooLargeError, ReadError


def test_load_file_with_header(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_bytes(b"hi")

    assert load_file(str(f), "a.txt", max_size=1024) == "<!-- File: a.txt -->\nhi"


def test_load_file_without_header_is_exact(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_bytes(b"line1\r\nline2\n\n")

    assert load_file(str(f), "a.txt", max_size=1024, add_header=False) == "line1\r\nline2\n\n"


def test_invalid_utf8_is_replaced_not_fatal(tmp_path: Path):
    """Binary garbage is decoded with replacement characters."""
    f = tmp_path / "blob.bin"
    f.write_bytes(b"ok\r\n\xff\xfe\x00end")

    assert read_text(str(f)) == "ok\r\n\ufffd\ufffd\x00end"


def test_size_ceiling_and_force(tmp_path: Path):
    f = tmp_path / "big.bin"
    f.write_bytes(b"x" * 11)

    with pytest.raises(FileTooLargeError) as exc_info:
        load_file(str(f), "big.bin", max_size=10)

    message = str(exc_info.value)
    assert "10 bytes" in message
    assert "11 bytes" in message
    assert "@!big.bin" in message
    assert load_file(str(f), "big.bin", max_size=10, force=True, add_header=False) == "x" * 11


def test_file_exactly_at_limit_is_allowed(tmp_path: Path):
    f = tmp_path / "edge.txt"
    f.write_bytes(b"x" * 10)
    assert check_size(str(f), 10) == 10


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundInBaseError):
        load_file(str(tmp_path / "gone.txt"), "gone.txt", max_size=10)


def _deny_stat_of(monkeypatch, target: Path) -> None:
    """Make os.stat fail with EACCES for one path only."""
    real_stat = os.stat
    denied = os.fspath(target)

    def fake_stat(path, *args, **kwargs):
        if os.fspath(path) == denied:
            raise PermissionError(errno.EACCES, "Permission denied", denied)
        return real_stat(path, *args, **kwargs)

    monkeypatch.setattr(os, "stat", fake_stat)


def test_stat_failure_is_read_error(tmp_path: Path, monkeypatch):
    f = tmp_path / "locked.txt"
    f.write_bytes(b"x")
    _deny_stat_of(monkeypatch, f)

    with pytest.raises(ReadError) as exc_info:
        check_size(str(f), max_size=1024)
    assert exc_info.value.kind == "ReadError"
    assert "Permission denied" in str(exc_info.value)


def test_open_failure_is_read_error(tmp_path: Path, monkeypatch):
    f = tmp_path / "locked.txt"
    f.write_bytes(b"x")

    def denied(path, *args, **kwargs):
        raise PermissionError(errno.EACCES, "Permission denied", str(path))

    monkeypatch.setattr(reader_module, "open", denied, raising=False)

    with pytest.raises(ReadError) as exc_info:
        load_file(str(f), "locked.txt", max_size=1024)
    assert "Permission denied" in str(exc_info.value)
    assert exc_info.value.path == str(f)
