from __future__ import annotations

"""
textcon: expand {{ @path }} references in text templates into file
contents and directory trees.
"""

from textcon.core.parsing.reference_parser import find_references, parse_template
from textcon.core.pipeline.engine import (
    ExpansionEngine,
    check_template,
    expand_template,
    expand_template_file,
    list_references,
    run_expansion,
)
from textcon.core.pipeline.validator import validate_config
from textcon.domain.config import TemplateConfig
from textcon.domain.constants import APP_VERSION
from textcon.domain.errors import (
    ConfigurationError,
    DirectoryNotFoundError,
    FileNotFoundInBaseError,
    FileTooLargeError,
    InvalidPatternError,
    InvalidReferenceError,
    PathTraversalError,
    ReadError,
    TextconError,
)
from textcon.domain.result_models import Diagnostic, ExpansionMode, ExpansionResult, Outcome

__version__ = APP_VERSION

__all__ = [
    "ConfigurationError",
    "Diagnostic",
    "DirectoryNotFoundError",
    "ExpansionEngine",
    "ExpansionMode",
    "ExpansionResult",
    "FileNotFoundInBaseError",
    "FileTooLargeError",
    "InvalidPatternError",
    "InvalidReferenceError",
    "Outcome",
    "PathTraversalError",
    "ReadError",
    "TemplateConfig",
    "TextconError",
    "check_template",
    "expand_template",
    "expand_template_file",
    "find_references",
    "list_references",
    "parse_template",
    "run_expansion",
    "validate_config",
]
