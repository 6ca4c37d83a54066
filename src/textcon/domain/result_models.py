from __future__ import annotations

"""
Expansion Result Data Models.

Defines the structures exchanged between the expansion engine and its
callers: resolved paths, exclusion decisions, per-reference diagnostic
records and the aggregate ExpansionResult.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from textcon.domain.errors import TextconError
from textcon.domain.reference_models import Reference, ReferenceIssue

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class EntryKind(str, Enum):
    """Filesystem nature of a resolved path."""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK_TO_FILE = "symlink-to-file"
    SYMLINK_TO_DIRECTORY = "symlink-to-directory"

    @property
    def is_directory(self) -> bool:
        return self in (EntryKind.DIRECTORY, EntryKind.SYMLINK_TO_DIRECTORY)

    @property
    def is_symlink(self) -> bool:
        return self in (EntryKind.SYMLINK_TO_FILE, EntryKind.SYMLINK_TO_DIRECTORY)


class Outcome(str, Enum):
    INCLUDED = "included"
    SKIPPED = "skipped"
    FAILED = "failed"


class ExpansionMode(str, Enum):
    """Execution modes of the expansion engine."""
    EXPAND = "expand"
    DRY_RUN = "dry-run"
    LIST = "list"


# -----------------------------------------------------------------------------
# RESOLUTION AND FILTERING MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolvedPath:
    """
    Canonical, confined location of a reference target.

    Attributes:
        path: Canonical absolute path (symlinks resolved).
        rel_path: Logical path relative to the base directory, POSIX style.
        entry_kind: File/directory nature, noting symlinks.
    """
    path: str
    rel_path: str
    entry_kind: EntryKind


@dataclass(frozen=True)
class ExclusionDecision:
    """
    Include/Exclude verdict of the exclusion filter with its origin.

    Attributes:
        excluded: True if the candidate must be left out.
        rule: Pattern text that decided, or None when no rule matched.
        origin: Where the rule came from, e.g. 'src/.gitignore:3' or
                'manual exclude #2'.
    """
    excluded: bool
    rule: Optional[str] = None
    origin: Optional[str] = None

    def describe(self) -> str:
        if self.rule is None:
            return "no matching rule"
        verdict = "excluded" if self.excluded else "included"
        return f"{verdict} by '{self.rule}' ({self.origin})"


INCLUDE_BY_DEFAULT = ExclusionDecision(excluded=False)


# -----------------------------------------------------------------------------
# DIAGNOSTICS
# -----------------------------------------------------------------------------

@dataclass
class Diagnostic:
    """
    Outcome record of one placeholder occurrence.

    Attributes:
        reference: The parsed reference or the malformed placeholder.
        outcome: INCLUDED, SKIPPED or FAILED.
        error: Failure cause when outcome is FAILED.
        resolved: Resolution result when resolution succeeded.
        exclusion: Exclusion verdict when the filter was consulted.
        size: File size in bytes for file targets.
    """
    reference: Union[Reference, ReferenceIssue]
    outcome: Outcome
    error: Optional[TextconError] = None
    resolved: Optional[ResolvedPath] = None
    exclusion: Optional[ExclusionDecision] = None
    size: Optional[int] = None

    @property
    def reason(self) -> str:
        if self.error is not None:
            return self.error.message
        if self.exclusion is not None and self.exclusion.excluded:
            return self.exclusion.describe()
        return ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly mapping, omitting absent fields."""
        ref = self.reference
        data: Dict[str, Any] = {
            "reference": ref.raw,
            "start": ref.start,
            "end": ref.end,
            "outcome": self.outcome.value,
        }
        if isinstance(ref, Reference):
            data["force"] = ref.force
            data["kind"] = ref.kind.value
        if self.resolved is not None:
            data["path"] = self.resolved.path
            data["exists"] = True
            data["file_type"] = self.resolved.entry_kind.value
        elif self.error is not None and self.error.path is not None:
            data["path"] = self.error.path
            data["exists"] = self.error.kind not in ("FileNotFound", "DirectoryNotFound")
        if self.size is not None:
            data["size"] = self.size
        if self.exclusion is not None and self.exclusion.rule is not None:
            data["rule"] = self.exclusion.describe()
        if self.error is not None:
            data["error_kind"] = self.error.kind
            data["error"] = self.error.message
        return data


@dataclass
class ExpansionResult:
    """
    Aggregate result of one engine run.

    Attributes:
        mode: Mode the engine ran in.
        output: Expanded document (EXPAND mode only, None otherwise).
        diagnostics: One record per placeholder, in template order.
    """
    mode: ExpansionMode
    output: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failures(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.outcome is Outcome.FAILED]

    @property
    def skipped(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.outcome is Outcome.SKIPPED]

    @property
    def included(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.outcome is Outcome.INCLUDED]

    def to_list(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self.diagnostics]
