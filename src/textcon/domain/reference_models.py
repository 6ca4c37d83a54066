from __future__ import annotations

"""
Template Reference Data Models.

Defines the immutable units produced by the reference parser: literal
text spans, well-formed placeholder references and malformed placeholder
issues. A parsed template is a single ordered sequence of these segments
covering the source text end to end.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class ReferenceKind(str, Enum):
    """Declared target kind of a placeholder."""
    FILE = "file"
    DIRECTORY = "directory"


# -----------------------------------------------------------------------------
# SEGMENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LiteralSpan:
    """
    Text outside any placeholder, passed through unchanged.

    Attributes:
        start: Offset of the first character in the template.
        end: Offset one past the last character.
        text: The literal text itself.
    """
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class Reference:
    """
    One well-formed `{{ @... }}` placeholder occurrence.

    Attributes:
        start: Offset of the opening '{{'.
        end: Offset one past the closing '}}'.
        text: Full placeholder text including delimiters.
        raw: Reference token as written, e.g. '@!src/'.
        path: Normalized relative path ('.' for the base directory).
        force: True when the '!' modifier was present.
        kind: FILE, or DIRECTORY when a trailing slash or '.' was used.
    """
    start: int
    end: int
    text: str
    raw: str
    path: str
    force: bool = False
    kind: ReferenceKind = ReferenceKind.FILE

    @property
    def is_base_dir(self) -> bool:
        return self.path == "."


@dataclass(frozen=True)
class ReferenceIssue:
    """
    A malformed placeholder kept in place of a Reference.

    Attributes:
        start: Offset of the opening '{{'.
        end: Offset one past the consumed text.
        text: The malformed source text.
        message: Why the placeholder was rejected.
    """
    start: int
    end: int
    text: str
    message: str

    @property
    def raw(self) -> str:
        return self.text.strip()


Segment = Union[LiteralSpan, Reference, ReferenceIssue]


@dataclass(frozen=True)
class ParsedTemplate:
    """
    Ordered segments covering a template from offset 0 to its end.
    """
    source: str
    segments: List[Segment] = field(default_factory=list)

    @property
    def references(self) -> List[Reference]:
        return [s for s in self.segments if isinstance(s, Reference)]

    @property
    def issues(self) -> List[ReferenceIssue]:
        return [s for s in self.segments if isinstance(s, ReferenceIssue)]

    @property
    def placeholders(self) -> List[Union[Reference, ReferenceIssue]]:
        """Every placeholder, valid or not, in template order."""
        return [s for s in self.segments if not isinstance(s, LiteralSpan)]
