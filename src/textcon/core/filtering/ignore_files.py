from __future__ import annotations

"""
Hierarchical Ignore-File Source.

Loads .gitignore files from the base directory down to any directory on
demand and compiles each line with pathspec's gitwildmatch implementation.
Rules are returned farthest file first and in line order, so a caller
that keeps the last matching rule gets git's precedence: nearer files
override farther ones and later lines override earlier ones.
"""

import logging
import os
import posixpath
import re
from dataclasses import dataclass
from typing import Dict, List

from pathspec.patterns import GitWildMatchPattern

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".gitignore"
REPO_EXCLUDE_FILE = os.path.join(".git", "info", "exclude")

# -----------------------------------------------------------------------------
# RULE MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class IgnoreRule:
    """
    One compiled ignore-file line.

    Attributes:
        pattern: Line text as written.
        excludes: True for ignore lines, False for '!' re-include lines.
        regex: Compiled gitwildmatch expression.
        scope: Directory the rule is relative to ('' for the base).
        origin: '<file>:<line>' for diagnostics.
    """
    pattern: str
    excludes: bool
    regex: re.Pattern
    scope: str
    origin: str

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        """Match a base-relative path that lies inside this rule's scope."""
        local = rel_path[len(self.scope) + 1:] if self.scope else rel_path
        if is_dir:
            local += "/"
        return self.regex.match(local) is not None

# -----------------------------------------------------------------------------
# SOURCE
# -----------------------------------------------------------------------------

class IgnoreFileSource:
    """
    Lazily parsed, per-run cache of ignore files below a base directory.

    Instances are not shared between runs, so every expansion observes
    the ignore files as they are on disk at that moment.
    """

    def __init__(self, base_dir: str):
        self._base_dir = base_dir
        self._per_directory: Dict[str, List[IgnoreRule]] = {}

    def rules_for(self, dir_rel: str) -> List[IgnoreRule]:
        """
        Collect the rules that apply to entries of a directory.

        Args:
            dir_rel: Directory relative to the base ('' for the base).

        Returns:
            List[IgnoreRule]: Rules from the base down to dir_rel, in
                              precedence order (last match wins).
        """
        rules: List[IgnoreRule] = list(self._load(""))
        if dir_rel in ("", "."):
            return rules

        current = ""
        for part in dir_rel.split("/"):
            current = posixpath.join(current, part) if current else part
            rules.extend(self._load(current))
        return rules

    def _load(self, dir_rel: str) -> List[IgnoreRule]:
        cached = self._per_directory.get(dir_rel)
        if cached is not None:
            return cached

        directory = os.path.join(self._base_dir, *dir_rel.split("/")) if dir_rel else self._base_dir
        rules: List[IgnoreRule] = []
        if not dir_rel:
            rules.extend(self._parse_file(os.path.join(directory, REPO_EXCLUDE_FILE), dir_rel))
        rules.extend(self._parse_file(os.path.join(directory, IGNORE_FILE_NAME), dir_rel))

        self._per_directory[dir_rel] = rules
        return rules

    def _parse_file(self, file_path: str, scope: str) -> List[IgnoreRule]:
        """Compile every effective line of one ignore file."""
        if not os.path.isfile(file_path):
            return []

        try:
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logger.warning(f"Unable to read ignore file '{file_path}': {e}")
            return []

        display = os.path.relpath(file_path, self._base_dir).replace(os.sep, "/")
        rules: List[IgnoreRule] = []
        for line_no, line in enumerate(lines, start=1):
            if not line.strip() or line.startswith("#"):
                continue
            try:
                compiled = GitWildMatchPattern(line)
            except ValueError as e:
                logger.warning(f"Skipping invalid rule {display}:{line_no} '{line}': {e}")
                continue
            if compiled.include is None or compiled.regex is None:
                continue
            rules.append(IgnoreRule(
                pattern=line,
                excludes=bool(compiled.include),
                regex=compiled.regex,
                scope=scope,
                origin=f"{display}:{line_no}",
            ))

        logger.debug(f"Loaded {len(rules)} ignore rules from {display}")
        return rules
