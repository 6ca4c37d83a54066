from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Template input, output writing and base-directory selection for the
command-line front end. The expansion core does its own confined reads
and never goes through these helpers.
"""

import os
import sys
from typing import Mapping, Optional, TextIO

from textcon.domain.constants import BASE_DIR_ENV_VAR

STDIN_MARKER = "-"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))


def select_base_dir(cli_value: Optional[str], environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Pick the base directory: CLI flag, then TEXTCON_BASE_DIR, then cwd.

    Returns:
        str: Absolute, not yet canonicalized, base directory.
    """
    env = os.environ if environ is None else environ
    return normalize_path(cli_value or env.get(BASE_DIR_ENV_VAR), os.getcwd())


def relative_to_base(path: str, base_dir: str) -> str:
    """
    Express a stitching input relative to the base directory.

    Relative inputs are already relative to the base and are kept as
    written. Absolute inputs are relativized and may come out with '..'
    when they lie outside the base, which the parser then rejects.
    """
    if not os.path.isabs(path):
        return path.replace(os.sep, "/")
    rel = os.path.relpath(path, os.path.abspath(base_dir))
    return rel.replace(os.sep, "/")

# -----------------------------------------------------------------------------
# TEMPLATE I/O API
# -----------------------------------------------------------------------------

def read_template(source: str, stdin: Optional[TextIO] = None) -> str:
    """
    Read template text from a file path or, for '-', from standard input.

    Files are decoded as UTF-8 with invalid sequences replaced.

    Raises:
        OSError: If the template file cannot be read.
    """
    if source == STDIN_MARKER:
        stream = stdin if stdin is not None else sys.stdin
        return stream.read()

    with open(source, "rb") as f:
        return f.read().decode("utf-8", errors="replace")


def write_output(text: str, destination: Optional[str], stdout: Optional[TextIO] = None) -> None:
    """
    Write the final document to a file, or to standard output when no
    destination is given. Files are written as UTF-8 without newline
    translation.
    """
    if not destination:
        stream = stdout if stdout is not None else sys.stdout
        stream.write(text)
        stream.flush()
        return

    parent = os.path.dirname(os.path.abspath(destination))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)
    with open(destination, "w", encoding="utf-8", newline="") as f:
        f.write(text)
