from __future__ import annotations

"""
Exclusion Filter.

Composes independent rule tiers into a single Include/Exclude decision
with a traceable rule origin. Each tier answers Exclude, Include or no
opinion; tiers are consulted in a fixed order and the last tier with an
opinion wins. Ignore-file rules come first and manual excludes last, so
a manual exclude always has the final say.
"""

import logging
import posixpath
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from pathspec.patterns import GitWildMatchPattern

from textcon.core.filtering.ignore_files import IgnoreFileSource
from textcon.domain.errors import InvalidPatternError
from textcon.domain.result_models import INCLUDE_BY_DEFAULT, ExclusionDecision

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# TIER INTERFACE
# -----------------------------------------------------------------------------

class RuleTier(Protocol):
    """A rule source returning a decision, or None for no opinion."""

    def evaluate(self, rel_path: str, is_dir: bool) -> Optional[ExclusionDecision]:
        ...


# -----------------------------------------------------------------------------
# IGNORE-FILE TIER
# -----------------------------------------------------------------------------

class IgnoreFileTier:
    """
    Git-style rules from hierarchical .gitignore files.

    The last matching rule among all applicable files decides; '!' lines
    re-include what earlier or farther lines excluded.
    """

    def __init__(self, source: IgnoreFileSource):
        self._source = source

    def evaluate(self, rel_path: str, is_dir: bool) -> Optional[ExclusionDecision]:
        parent = posixpath.dirname(rel_path)
        verdict = None
        for rule in self._source.rules_for(parent):
            if rule.matches(rel_path, is_dir):
                verdict = rule

        if verdict is None:
            return None
        return ExclusionDecision(excluded=verdict.excludes, rule=verdict.pattern, origin=verdict.origin)


class PredicateTier:
    """Adapts a plain `(rel_path, is_dir) -> bool` ignore predicate."""

    def __init__(self, predicate: Callable[[str, bool], bool], origin: str = "ignore predicate"):
        self._predicate = predicate
        self._origin = origin

    def evaluate(self, rel_path: str, is_dir: bool) -> Optional[ExclusionDecision]:
        if self._predicate(rel_path, is_dir):
            return ExclusionDecision(excluded=True, rule=rel_path, origin=self._origin)
        return None


# -----------------------------------------------------------------------------
# MANUAL EXCLUDE TIER
# -----------------------------------------------------------------------------

class ManualExcludeTier:
    """
    Ordered manual glob patterns, exclude-only.

    A pattern without '/' matches the final component at any depth, a
    pattern containing '/' is anchored at the base directory, and a
    trailing '/**' also removes the directory itself. Negated patterns
    cannot re-include and are ignored.
    """

    def __init__(self, patterns: Sequence[str]):
        self._rules: List[Tuple[int, str, list]] = []
        for index, pattern in enumerate(patterns, start=1):
            if pattern.startswith("!"):
                logger.warning(f"Manual exclude '{pattern}' ignored: negation is not supported")
                continue
            regexes = [_compile(pattern, pattern)]
            if pattern.endswith("/**"):
                container = pattern[:-3]
                if not container.startswith("/"):
                    container = "/" + container
                regexes.append(_compile(container + "/", pattern))
            regexes = [rx for rx in regexes if rx is not None]
            if regexes:
                self._rules.append((index, pattern, regexes))

    @property
    def patterns(self) -> List[str]:
        return [pattern for _, pattern, _ in self._rules]

    def evaluate(self, rel_path: str, is_dir: bool) -> Optional[ExclusionDecision]:
        candidate = rel_path + "/" if is_dir else rel_path
        verdict = None
        for index, pattern, regexes in self._rules:
            if any(rx.match(candidate) for rx in regexes):
                verdict = (index, pattern)

        if verdict is None:
            return None
        return ExclusionDecision(excluded=True, rule=verdict[1], origin=f"manual exclude #{verdict[0]}")


# -----------------------------------------------------------------------------
# COMPOSED FILTER
# -----------------------------------------------------------------------------

class ExclusionFilter:
    """
    Precedence-ordered chain of rule tiers for one run.

    Args:
        base_dir: Canonical base directory.
        respect_gitignore: Enable the ignore-file tier.
        manual_excludes: Manual glob patterns (final tier).
        ignore_predicate: Optional external ignore source used in place
                          of the built-in .gitignore reader.
    """

    def __init__(
            self,
            base_dir: str,
            respect_gitignore: bool = True,
            manual_excludes: Sequence[str] = (),
            ignore_predicate: Optional[Callable[[str, bool], bool]] = None,
    ):
        self._tiers: List[RuleTier] = []
        if respect_gitignore:
            if ignore_predicate is not None:
                self._tiers.append(PredicateTier(ignore_predicate))
            else:
                self._tiers.append(IgnoreFileTier(IgnoreFileSource(base_dir)))
        self._tiers.append(ManualExcludeTier(manual_excludes))

    def evaluate(self, rel_path: str, is_dir: bool) -> ExclusionDecision:
        """
        Decide for a single path without looking at its ancestors.

        Used during traversal, where excluded ancestors are already pruned.
        """
        decision = None
        for tier in self._tiers:
            opinion = tier.evaluate(rel_path, is_dir)
            if opinion is not None:
                decision = opinion
        return decision or INCLUDE_BY_DEFAULT

    def decide(self, rel_path: str, is_dir: bool) -> ExclusionDecision:
        """
        Decide for a path, excluding it when any ancestor directory is excluded.

        Args:
            rel_path: Path relative to the base directory, POSIX style.
            is_dir: Whether the path names a directory.

        Returns:
            ExclusionDecision: The verdict and the rule that produced it.
        """
        if rel_path in ("", "."):
            return INCLUDE_BY_DEFAULT

        parts = rel_path.split("/")
        for i in range(1, len(parts)):
            ancestor = self.evaluate("/".join(parts[:i]), True)
            if ancestor.excluded:
                return ancestor
        return self.evaluate(rel_path, is_dir)

    def decide_linked(self, rel_path: str, target_rel: str, is_dir: bool) -> ExclusionDecision:
        """
        Decide for a path reached through a symlink.

        The entry is excluded when either its logical path or the
        base-relative path of its canonical target is excluded, so an alias
        cannot re-expose an excluded file.

        Args:
            rel_path: Logical path as written, relative to the base.
            target_rel: Canonical target relative to the base.
            is_dir: Whether the target is a directory.
        """
        decision = self.decide(rel_path, is_dir)
        if decision.excluded or target_rel == rel_path:
            return decision
        target = self.decide(target_rel, is_dir)
        return target if target.excluded else decision

    def is_excluded(self, rel_path: str, is_dir: bool) -> bool:
        return self.decide(rel_path, is_dir).excluded


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _compile(pattern: str, original: str):
    try:
        compiled = GitWildMatchPattern(pattern)
    except ValueError as e:
        raise InvalidPatternError(original, str(e)) from e
    return compiled.regex if compiled.include else None


def validate_patterns(patterns: Sequence[str]) -> None:
    """Raise InvalidPatternError for the first pattern that cannot compile."""
    ManualExcludeTier(patterns)
