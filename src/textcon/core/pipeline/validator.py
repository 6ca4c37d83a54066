from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper between untrusted option sources (CLI flags, environment,
embedding callers) and the immutable TemplateConfig consumed by the
engine. Handles type coercion, size-suffix parsing and default injection;
strict mode turns every coercion into a ConfigurationError instead.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

from textcon.core.filtering.exclusion import validate_patterns
from textcon.domain.config import TemplateConfig, get_default_config
from textcon.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([kmg]?)(i?b)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "k": 1024, "m": 1024 ** 2, "g": 1024 ** 3}
_UNLIMITED_WORDS = ("none", "unlimited", "inf", "")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[TemplateConfig, List[str]]:
    """
    Validate and normalize a raw configuration mapping.

    Missing keys take their TemplateConfig defaults. Unknown keys are
    reported and ignored.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raise on the first invalid value instead of coercing.

    Returns:
        Tuple[TemplateConfig, List[str]]: The validated configuration and
                                          the warnings produced on the way.

    Raises:
        ConfigurationError: In strict mode, for any invalid value.
        InvalidPatternError: If a manual exclude pattern cannot compile.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if config is None:
        config = {}
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return TemplateConfig(), warnings

    for key in config:
        if key not in defaults:
            msg = f"Unknown configuration key '{key}'."
            if strict:
                raise ConfigurationError(msg)
            warnings.append(f"{msg} Ignored.")

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    bool_fields = ["add_path_comments", "inline_contents", "respect_gitignore"]

    values: Dict[str, Any] = {
        "base_dir": _as_path(merged.get("base_dir"), defaults["base_dir"], "base_dir", warnings, strict),
        "max_tree_depth": _as_depth(merged.get("max_tree_depth"), defaults["max_tree_depth"], warnings, strict),
        "max_file_size": _as_size(merged.get("max_file_size"), defaults["max_file_size"], warnings, strict),
    }
    for field in bool_fields:
        values[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    patterns = _as_list_str(merged.get("manual_excludes"), [], "manual_excludes", warnings, strict)
    values["manual_excludes"] = tuple(_drop_negations(patterns, warnings, strict))
    validate_patterns(values["manual_excludes"])

    for warning in warnings:
        logger.debug(f"Configuration warning: {warning}")

    return TemplateConfig(**values), warnings


def parse_size(value: str) -> int:
    """
    Parse a byte size such as '65536', '64K', '64KiB' or '1M'.

    Raises:
        ValueError: If the text is not a recognised size.
    """
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"invalid size '{value}'")
    return int(match.group(1)) * _SIZE_UNITS[match.group(2).lower()]

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _reject(msg: str, warnings: List[str], strict: bool) -> None:
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")


def _as_path(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    if value is None:
        return fallback
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    _reject(f"Invalid field '{field}': expected path, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    _reject(f"Invalid field '{field}': expected bool, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_depth(value: Any, fallback: Optional[int], warnings: List[str], strict: bool) -> Optional[int]:
    """Accept a non-negative int, or None for an unlimited tree."""
    if value is None:
        return None
    if isinstance(value, bool):
        _reject("Invalid field 'max_tree_depth': expected int, received bool.", warnings, strict)
        return fallback
    if isinstance(value, int):
        if value >= 0:
            return value
        _reject(f"Invalid field 'max_tree_depth': {value} is negative.", warnings, strict)
        return fallback

    if isinstance(value, str) and not strict:
        s = value.strip().lower()
        if s in _UNLIMITED_WORDS:
            warnings.append(f"Field 'max_tree_depth' converted from '{value}' to unlimited.")
            return None
        if s.isdigit():
            warnings.append(f"Field 'max_tree_depth' converted from '{value}' to {int(s)}.")
            return int(s)

    _reject(f"Invalid field 'max_tree_depth': expected int, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_size(value: Any, fallback: int, warnings: List[str], strict: bool) -> int:
    """Accept a positive byte count, or a size string outside strict mode."""
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool):
        if value > 0:
            return value
        _reject(f"Invalid field 'max_file_size': {value} is not positive.", warnings, strict)
        return fallback

    if isinstance(value, str) and not strict:
        try:
            size = parse_size(value)
        except ValueError:
            size = 0
        if size > 0:
            warnings.append(f"Field 'max_file_size' converted from '{value}' to {size}.")
            return size

    _reject(f"Invalid field 'max_file_size': cannot use {value!r}.", warnings, strict)
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        warnings.append(f"Field '{field}' converted from CSV string to list.")
        return items

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise ConfigurationError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    _reject(f"Invalid field '{field}': expected list[str], received {type(value).__name__}.", warnings, strict)
    return list(fallback)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _drop_negations(patterns: List[str], warnings: List[str], strict: bool) -> List[str]:
    """Manual excludes cannot re-include, so '!' patterns are removed."""
    out: List[str] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            msg = f"Manual exclude '{pattern}' is negated; manual excludes cannot re-include."
            if strict:
                raise ConfigurationError(msg)
            warnings.append(f"{msg} Pattern dropped.")
            continue
        out.append(pattern)
    return out
