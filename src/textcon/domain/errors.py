from __future__ import annotations

"""
Domain Exception Hierarchy.

Every failure the expansion engine can report is a subclass of
TextconError. Each carries a stable 'kind' identifier used by the
diagnostic records, the offending path where one exists, and an optional
reference location so the message points at the placeholder in the
template.
"""

import os
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from textcon.domain.reference_models import Reference, ReferenceIssue


# -----------------------------------------------------------------------------
# BASE EXCEPTION
# -----------------------------------------------------------------------------

class TextconError(Exception):
    """
    Root of all engine errors.

    Attributes:
        kind: Stable identifier of the error category.
        path: Filesystem path the error is about, if any.
        reference: Placeholder occurrence that produced the error, if known.
        location: (line, column) of the placeholder, both 1-based.
    """

    kind: str = "Error"

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.reference: Optional["Reference | ReferenceIssue"] = None
        self.location: Optional[Tuple[int, int]] = None

    def attach(self, reference: "Reference | ReferenceIssue", template: str) -> "TextconError":
        """Bind the error to a placeholder span of the given template."""
        self.reference = reference
        self.location = line_and_column(template, reference.start)
        return self

    def __str__(self) -> str:
        if self.reference is None or self.location is None:
            return self.message
        line, col = self.location
        return f"{self.message} (reference '{self.reference.text}' at line {line}, column {col})"


# -----------------------------------------------------------------------------
# PARSE AND RESOLUTION ERRORS
# -----------------------------------------------------------------------------

class InvalidReferenceError(TextconError):
    kind = "InvalidReference"


class PathTraversalError(TextconError):
    kind = "PathTraversal"

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Path traversal detected (trying to access files outside the base directory): {path}",
            path,
        )


class FileNotFoundInBaseError(TextconError):
    kind = "FileNotFound"

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}", path)


class DirectoryNotFoundError(TextconError):
    kind = "DirectoryNotFound"

    def __init__(self, path: str, detail: str = "") -> None:
        message = f"Directory not found: {path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, path)


# -----------------------------------------------------------------------------
# CONTENT ERRORS
# -----------------------------------------------------------------------------

class FileTooLargeError(TextconError):
    """Raised when a file exceeds the size ceiling without the force flag."""

    kind = "FileTooLarge"

    def __init__(self, path: str, size: int, max_size: int) -> None:
        name = os.path.basename(path) or "file"
        super().__init__(
            f"File size exceeds limit of {max_size} bytes: {path} ({size} bytes). "
            f"Use @!{name} to force inclusion.",
            path,
        )
        self.size = size
        self.max_size = max_size


class ReadError(TextconError):
    kind = "ReadError"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}", path)


# -----------------------------------------------------------------------------
# CONFIGURATION ERRORS
# -----------------------------------------------------------------------------

class ConfigurationError(TextconError):
    kind = "Configuration"


class InvalidPatternError(ConfigurationError):
    kind = "InvalidPattern"

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid exclude pattern '{pattern}': {reason}")
        self.pattern = pattern


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def line_and_column(text: str, offset: int) -> Tuple[int, int]:
    """Translate a string offset into a 1-based (line, column) pair."""
    line = text.count("\n", 0, offset) + 1
    last_newline = text.rfind("\n", 0, offset)
    return line, offset - last_newline
