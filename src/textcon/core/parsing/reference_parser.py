from __future__ import annotations

"""
Template Reference Parser.

Scans arbitrary template text for `{{ @[!]<path>[/] }}` placeholders and
produces an ordered sequence of literal spans, references and malformed
placeholder issues covering the whole input. Path normalization (leading
'/' and './' stripping, trailing-slash directory marking, base directory
aliases) happens here so the resolver receives a canonical relative form.
"""

import logging
from typing import List, Tuple

from textcon.domain.constants import (
    CLOSE_DELIMITER,
    FORCE_MARKER,
    OPEN_DELIMITER,
    REFERENCE_SIGIL,
)
from textcon.domain.reference_models import (
    LiteralSpan,
    ParsedTemplate,
    Reference,
    ReferenceIssue,
    ReferenceKind,
    Segment,
)

logger = logging.getLogger(__name__)

_DISALLOWED_CHARS = frozenset("{}")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse_template(text: str) -> ParsedTemplate:
    """
    Split a template into literal spans and placeholder segments.

    A placeholder starts at '{{' followed (after optional whitespace,
    line breaks included) by '@'. Its body ends at the first '}}'; if
    another '{{' comes first the placeholder is unterminated and reported
    as an issue, and scanning resumes at that '{{' so later placeholders
    are still found.
    '{{' not followed by '@' is ordinary text.

    Args:
        text: Raw template content.

    Returns:
        ParsedTemplate: Segments in source order, covering the full text.
    """
    segments: List[Segment] = []
    literal_start = 0
    pos = 0
    length = len(text)

    while True:
        opening = text.find(OPEN_DELIMITER, pos)
        if opening < 0:
            break

        body_start = _skip_whitespace(text, opening + len(OPEN_DELIMITER))
        if body_start >= length or text[body_start] != REFERENCE_SIGIL:
            pos = opening + 1
            continue

        end, terminated = _find_body_end(text, body_start)
        if opening > literal_start:
            segments.append(LiteralSpan(literal_start, opening, text[literal_start:opening]))

        source = text[opening:end]
        if not terminated:
            segments.append(ReferenceIssue(opening, end, source, "unterminated placeholder, missing '}}'"))
        else:
            body = text[body_start:end - len(CLOSE_DELIMITER)]
            try:
                raw, path, force, kind = _parse_body(body)
                segments.append(Reference(opening, end, source, raw, path, force, kind))
            except ValueError as e:
                segments.append(ReferenceIssue(opening, end, source, str(e)))

        literal_start = end
        pos = end

    if literal_start < length:
        segments.append(LiteralSpan(literal_start, length, text[literal_start:]))

    parsed = ParsedTemplate(source=text, segments=segments)
    logger.debug(
        f"Parsed template: {len(parsed.references)} references, {len(parsed.issues)} malformed"
    )
    return parsed


def find_references(text: str) -> List[Reference]:
    """Return only the well-formed references of a template, in order."""
    return parse_template(text).references


def normalize_reference_path(path_text: str) -> Tuple[str, ReferenceKind]:
    """
    Normalize the path part of a reference.

    Strips leading '/' and './', collapses empty and '.' segments, and
    marks the reference as a directory when it ends with '/' or names
    the base directory.

    Args:
        path_text: Path as written after '@' or '@!'.

    Returns:
        Tuple[str, ReferenceKind]: Normalized relative path ('.' for the
                                   base directory) and its declared kind.

    Raises:
        ValueError: If the path is empty or contains disallowed content.
    """
    if not path_text:
        raise ValueError("empty path")

    for ch in path_text:
        if ord(ch) < 0x20 or ord(ch) == 0x7F or ch in _DISALLOWED_CHARS:
            raise ValueError(f"disallowed character {ch!r} in path")

    is_directory = path_text.endswith("/")

    trimmed = path_text
    while True:
        if trimmed.startswith("/"):
            trimmed = trimmed[1:]
        elif trimmed.startswith("./"):
            trimmed = trimmed[2:]
        else:
            break

    parts = trimmed.split("/")
    if ".." in parts:
        raise ValueError("parent directory segments ('..') are not allowed")

    parts = [p for p in parts if p not in ("", ".")]
    normalized = "/".join(parts) or "."
    if normalized == ".":
        is_directory = True

    return normalized, ReferenceKind.DIRECTORY if is_directory else ReferenceKind.FILE

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _find_body_end(text: str, body_start: int) -> Tuple[int, bool]:
    """
    Locate where a placeholder body ends.

    Returns:
        Tuple[int, bool]: Offset one past the placeholder and whether it
                          was properly closed by '}}'.
    """
    close = text.find(CLOSE_DELIMITER, body_start)
    reopen = text.find(OPEN_DELIMITER, body_start)

    if close >= 0 and (reopen < 0 or close < reopen):
        return close + len(CLOSE_DELIMITER), True
    return (reopen if reopen >= 0 else len(text)), False


def _parse_body(body: str) -> Tuple[str, str, bool, ReferenceKind]:
    """Decode '@[!]path' into (raw, normalized path, force, kind)."""
    raw = body.strip()
    rest = raw[len(REFERENCE_SIGIL):]

    force = rest.startswith(FORCE_MARKER)
    if force:
        rest = rest[len(FORCE_MARKER):]

    path, kind = normalize_reference_path(rest.strip())
    return raw, path, force, kind
