from __future__ import annotations

"""
Size-Checked File Loading Component.

Reads referenced files as raw bytes and decodes them permissively, so
binary artifacts or broken UTF-8 sequences never abort a run. Only the
size ceiling, missing targets and operating-system read failures are
reported as errors.
"""

import logging
import os

from textcon.domain.constants import FILE_HEADER
from textcon.domain.errors import FileNotFoundInBaseError, FileTooLargeError, ReadError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# SIZE CHECKS
# -----------------------------------------------------------------------------

def file_size(file_path: str) -> int:
    """
    Return the byte size of a file without reading it.

    Raises:
        FileNotFoundInBaseError: If the file vanished.
        ReadError: For any other stat failure.
    """
    try:
        return os.stat(file_path).st_size
    except FileNotFoundError as e:
        raise FileNotFoundInBaseError(file_path) from e
    except OSError as e:
        raise ReadError(file_path, e.strerror or str(e)) from e


def check_size(file_path: str, max_size: int, force: bool = False) -> int:
    """
    Enforce the size ceiling for a file.

    Args:
        file_path: Canonical file path.
        max_size: Byte ceiling.
        force: Skip the ceiling.

    Returns:
        int: The file size in bytes.

    Raises:
        FileTooLargeError: If the file exceeds max_size and force is False.
    """
    size = file_size(file_path)
    if size > max_size and not force:
        raise FileTooLargeError(file_path, size, max_size)
    return size

# -----------------------------------------------------------------------------
# READING
# -----------------------------------------------------------------------------

def read_text(file_path: str) -> str:
    """
    Read a file and decode it as UTF-8, replacing invalid sequences.

    Line endings are preserved exactly.
    """
    try:
        with open(file_path, "rb") as f:
            data = f.read()
    except FileNotFoundError as e:
        raise FileNotFoundInBaseError(file_path) from e
    except OSError as e:
        raise ReadError(file_path, e.strerror or str(e)) from e

    return data.decode("utf-8", errors="replace")


def load_file(
        file_path: str,
        rel_path: str,
        max_size: int,
        force: bool = False,
        add_header: bool = True,
) -> str:
    """
    Produce the emitted fragment of a file reference.

    Args:
        file_path: Canonical path of the file.
        rel_path: Path relative to the base directory, used in the header.
        max_size: Byte ceiling applied unless force is set.
        force: Bypass the size ceiling.
        add_header: Prefix the content with a path comment line.

    Returns:
        str: Optional header line followed by the exact file text.
    """
    size = check_size(file_path, max_size, force)
    content = read_text(file_path)
    logger.debug(f"Loaded '{rel_path}' ({size} bytes{', forced' if force else ''})")

    if add_header:
        return FILE_HEADER.format(path=rel_path) + "\n" + content
    return content
