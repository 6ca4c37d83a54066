from __future__ import annotations

"""
Confined Path Resolution.

Turns normalized reference paths into canonical absolute paths that are
guaranteed to lie inside the run's base directory. Canonicalization
resolves '.', '..' and symlink chains before the confinement check, so a
link that lives inside the boundary but points outside it is rejected the
same way as a literal '../' escape.
"""

import logging
import os
import stat
from typing import Optional

from textcon.domain.errors import (
    DirectoryNotFoundError,
    FileNotFoundInBaseError,
    PathTraversalError,
    ReadError,
)
from textcon.domain.reference_models import ReferenceKind
from textcon.domain.result_models import EntryKind, ResolvedPath

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# BASE DIRECTORY
# -----------------------------------------------------------------------------

def canonicalize_base_dir(base_dir: str) -> str:
    """
    Resolve the confinement boundary once for a run.

    Args:
        base_dir: Base directory as configured (relative or absolute).

    Returns:
        str: Canonical absolute path of the base directory.

    Raises:
        DirectoryNotFoundError: If the path does not name a directory.
    """
    canonical = os.path.realpath(os.path.abspath(base_dir))
    if not os.path.isdir(canonical):
        raise DirectoryNotFoundError(canonical, "base directory")
    return canonical


def is_within(path: str, base_dir: str) -> bool:
    """Check that a canonical path equals or lies below a canonical base."""
    if path == base_dir:
        return True
    prefix = base_dir if base_dir.endswith(os.sep) else base_dir + os.sep
    return path.startswith(prefix)


def base_relative(canonical: str, base_dir: str) -> str:
    """POSIX path of a canonical location relative to the canonical base ('.' for the base)."""
    return os.path.relpath(canonical, base_dir).replace(os.sep, "/")

# -----------------------------------------------------------------------------
# REFERENCE RESOLUTION
# -----------------------------------------------------------------------------

def resolve_reference_path(
        rel_path: str,
        base_dir: str,
        expected_kind: ReferenceKind = ReferenceKind.FILE,
) -> ResolvedPath:
    """
    Resolve a relative reference path against the canonical base directory.

    Args:
        rel_path: Normalized relative path ('.' for the base itself).
        base_dir: Canonical base directory (see canonicalize_base_dir).
        expected_kind: Declared kind, selects FileNotFound vs
                       DirectoryNotFound for missing targets.

    Returns:
        ResolvedPath: Canonical confined location and its entry kind.

    Raises:
        PathTraversalError: If the canonical path escapes base_dir.
        FileNotFoundInBaseError: If a file-kind target does not exist.
        DirectoryNotFoundError: If a directory-kind target does not exist
                                or is not a directory.
        ReadError: If the target exists but is neither file nor directory.
    """
    raw_joined = os.path.join(base_dir, rel_path)
    joined = os.path.normpath(raw_joined)
    canonical = os.path.realpath(raw_joined)

    if not is_within(canonical, base_dir):
        logger.debug(f"Confinement violation: '{rel_path}' resolves to '{canonical}'")
        raise PathTraversalError(canonical)

    entry_kind = _classify(joined, canonical)
    if entry_kind is None:
        if expected_kind is ReferenceKind.DIRECTORY:
            raise DirectoryNotFoundError(joined)
        raise FileNotFoundInBaseError(joined)

    if expected_kind is ReferenceKind.DIRECTORY and not entry_kind.is_directory:
        raise DirectoryNotFoundError(joined, "target is a file")

    logical = os.path.relpath(joined, base_dir).replace(os.sep, "/")
    return ResolvedPath(path=canonical, rel_path=logical, entry_kind=entry_kind)


def resolve_entry(entry_path: str, base_dir: str) -> Optional[str]:
    """
    Canonicalize a path met during enumeration, enforcing confinement.

    Returns:
        Optional[str]: Canonical path, or None if it escapes base_dir or
                       dangles.
    """
    canonical = os.path.realpath(entry_path)
    if not is_within(canonical, base_dir) or not os.path.exists(canonical):
        return None
    return canonical

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _classify(joined: str, canonical: str) -> Optional[EntryKind]:
    """Determine the entry kind, or None when the target is missing."""
    try:
        st = os.stat(canonical)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ReadError(joined, e.strerror or str(e)) from e

    via_link = _traverses_symlink(joined, canonical)
    if stat.S_ISDIR(st.st_mode):
        return EntryKind.SYMLINK_TO_DIRECTORY if via_link else EntryKind.DIRECTORY
    if stat.S_ISREG(st.st_mode):
        return EntryKind.SYMLINK_TO_FILE if via_link else EntryKind.FILE
    raise ReadError(joined, "not a regular file or directory")


def _traverses_symlink(joined: str, canonical: str) -> bool:
    return os.path.islink(joined) or os.path.normcase(joined) != os.path.normcase(canonical)
