from __future__ import annotations

"""
Configuration Domain Model.

Holds the immutable TemplateConfig value handed to the expansion engine
and the dictionary form of its defaults used by the validation stage and
the CLI configuration dump.
"""

import os
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from textcon.domain.constants import DEFAULT_TREE_DEPTH, MAX_FILE_SIZE

# -----------------------------------------------------------------------------
# CONFIGURATION MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TemplateConfig:
    """
    Options of one expansion run.

    Attributes:
        base_dir: Confinement boundary and root for relative references.
        max_tree_depth: Recursion bound for directory trees (None = unlimited).
        max_file_size: Byte ceiling for file contents without force.
        add_path_comments: Emit path headers before file and tree blocks.
        inline_contents: Inline file contents under non-forced directory
                         references as well.
        respect_gitignore: Honour hierarchical .gitignore rules.
        manual_excludes: Ordered glob patterns that always exclude.
    """
    base_dir: str = field(default_factory=os.getcwd)
    max_tree_depth: Optional[int] = DEFAULT_TREE_DEPTH
    max_file_size: int = MAX_FILE_SIZE
    add_path_comments: bool = True
    inline_contents: bool = False
    respect_gitignore: bool = True
    manual_excludes: Tuple[str, ...] = ()

    def with_overrides(self, **changes: Any) -> "TemplateConfig":
        """Return a copy with the given fields replaced."""
        if "manual_excludes" in changes and changes["manual_excludes"] is not None:
            changes["manual_excludes"] = tuple(changes["manual_excludes"])
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["manual_excludes"] = list(self.manual_excludes)
        return data


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default configuration as a plain dictionary.

    Returns:
        Dict[str, Any]: Default values keyed by TemplateConfig field name.
    """
    return TemplateConfig().to_dict()
