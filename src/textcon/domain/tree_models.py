from __future__ import annotations

"""
Directory Tree Data Models.

Provides the flat node records produced by the tree renderer and the
rendered result that pairs the visual lines with the file entries in
display order.
"""

from dataclasses import dataclass, field
from typing import List

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TreeEntry:
    """
    A listed directory entry.

    Attributes:
        name: Entry name within its parent.
        rel_path: Logical path relative to the base directory (POSIX).
        path: Canonical absolute path.
        is_dir: Whether the entry is (or links to) a directory.
        depth: Distance from the referenced directory (children = 1).
    """
    name: str
    rel_path: str
    path: str
    is_dir: bool
    depth: int


@dataclass
class RenderedTree:
    """
    Output of one tree rendering.

    Attributes:
        lines: Visual lines, the root label first.
        files: File entries in the same order they appear in the tree.
    """
    lines: List[str] = field(default_factory=list)
    files: List[TreeEntry] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
