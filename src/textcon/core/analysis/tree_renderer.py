from __future__ import annotations

"""
Directory Tree Renderer.

Produces the deterministic ASCII tree of a confined directory. Traversal
uses an explicit stack of directory frames instead of recursion, so the
depth limit is a counter check per entry and stack depth stays bounded.
Every entry passes the exclusion filter before it is listed, and excluded
directories are pruned without being opened.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from textcon.core.filtering.exclusion import ExclusionFilter
from textcon.core.resolution.path_resolver import base_relative, resolve_entry
from textcon.domain.constants import (
    TREE_BRANCH,
    TREE_LAST_BRANCH,
    TREE_PIPE,
    TREE_SPACE,
)
from textcon.domain.errors import ReadError
from textcon.domain.result_models import ResolvedPath
from textcon.domain.tree_models import RenderedTree, TreeEntry

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    dir_path: str
    prefix: str
    entries: List[TreeEntry] = field(default_factory=list)
    cursor: int = 0


# -----------------------------------------------------------------------------
# RENDERER
# -----------------------------------------------------------------------------

class TreeRenderer:
    """
    Renders directory trees for one run.

    Args:
        base_dir: Canonical confinement boundary.
        exclusion: Exclusion filter of the run.
        max_depth: Deepest level listed below the referenced directory
                   (children are level 1). None means unlimited.
    """

    def __init__(self, base_dir: str, exclusion: ExclusionFilter, max_depth: Optional[int] = None):
        self._base_dir = base_dir
        self._exclusion = exclusion
        self._max_depth = max_depth

    def render(self, root: ResolvedPath, force: bool = False) -> RenderedTree:
        """
        Render the tree under a resolved directory.

        Entries are sorted by name within each directory, directories and
        files interleaved. Directories carry a trailing '/'.

        Args:
            root: Resolved directory to render.
            force: Ignore the depth limit for this tree.

        Returns:
            RenderedTree: Lines (root label first) and the listed files in
                          display order.

        Raises:
            ReadError: If the root directory cannot be listed.
        """
        limit = None if force else self._max_depth
        label = "." if root.rel_path == "." else f"{root.rel_path}/"
        result = RenderedTree(lines=[label])

        if limit is not None and limit < 1:
            return result

        stack = [_Frame(root.path, "", self._list_children(root.path, root.rel_path, 1, strict=True))]

        while stack:
            frame = stack[-1]
            if frame.cursor >= len(frame.entries):
                stack.pop()
                continue

            entry = frame.entries[frame.cursor]
            frame.cursor += 1
            is_last = frame.cursor == len(frame.entries)

            connector = TREE_LAST_BRANCH if is_last else TREE_BRANCH
            suffix = "/" if entry.is_dir else ""
            result.lines.append(f"{frame.prefix}{connector}{entry.name}{suffix}")

            if not entry.is_dir:
                result.files.append(entry)
                continue

            if limit is not None and entry.depth >= limit:
                continue
            if any(f.dir_path == entry.path for f in stack):
                logger.debug(f"Symlink cycle at '{entry.rel_path}', not descending")
                continue

            child_prefix = frame.prefix + (TREE_SPACE if is_last else TREE_PIPE)
            children = self._list_children(entry.path, entry.rel_path, entry.depth + 1)
            stack.append(_Frame(entry.path, child_prefix, children))

        return result

    def _list_children(self, dir_path: str, dir_rel: str, depth: int, strict: bool = False) -> List[TreeEntry]:
        """
        List the visible, confined, non-excluded entries of a directory.

        Hidden names are skipped. Entries whose canonical target escapes
        the base directory, dangles, or is not a file or directory are
        left out.
        """
        try:
            with os.scandir(dir_path) as it:
                names = sorted(e.name for e in it)
        except OSError as e:
            if strict:
                raise ReadError(dir_path, e.strerror or str(e)) from e
            logger.warning(f"Unable to list '{dir_rel}': {e}")
            return []

        entries: List[TreeEntry] = []
        for name in names:
            if name.startswith("."):
                continue

            rel = name if dir_rel == "." else f"{dir_rel}/{name}"
            canonical = resolve_entry(os.path.join(dir_path, name), self._base_dir)
            if canonical is None:
                logger.debug(f"Skipping '{rel}': outside the base directory or dangling")
                continue

            is_dir = os.path.isdir(canonical)
            if not is_dir and not os.path.isfile(canonical):
                continue

            decision = self._exclusion.evaluate(rel, is_dir)
            if not decision.excluded and canonical != os.path.join(dir_path, name):
                # symlink: its target must not be excluded either
                target = self._exclusion.decide(base_relative(canonical, self._base_dir), is_dir)
                if target.excluded:
                    decision = target
            if decision.excluded:
                logger.debug(f"Pruned '{rel}': {decision.describe()}")
                continue

            entries.append(TreeEntry(name=name, rel_path=rel, path=canonical, is_dir=is_dir, depth=depth))

        return entries
