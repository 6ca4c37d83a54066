from __future__ import annotations

"""
CLI Output Formatting.

Renders the expanded document in the selected output format and turns
expansion diagnostics into the reports printed by the list and dry-run
modes.
"""

import html
import json
from typing import List

from textcon.domain.reference_models import Reference
from textcon.domain.result_models import Diagnostic, Outcome

# -----------------------------------------------------------------------------
# DOCUMENT FORMATS
# -----------------------------------------------------------------------------

def format_document(content: str, fmt: str) -> str:
    """
    Wrap the expanded document for the requested output format.

    Args:
        content: Expanded document.
        fmt: 'plain', 'markdown' or 'html'.

    Returns:
        str: The formatted document.
    """
    if fmt == "markdown":
        return f"```\n{content}\n```"
    if fmt == "html":
        return f"<pre><code>{html.escape(content, quote=False)}</code></pre>"
    return content

# -----------------------------------------------------------------------------
# LIST MODE
# -----------------------------------------------------------------------------

def format_list(diagnostics: List[Diagnostic], fmt: str) -> str:
    """Render list-mode diagnostics as plain, detailed or JSON text."""
    if fmt == "json":
        return json.dumps([d.to_dict() for d in diagnostics], ensure_ascii=False, indent=2)
    if fmt == "detailed":
        return "\n".join(_detailed_entry(d) for d in diagnostics)
    return "\n".join(d.reference.raw for d in diagnostics)


def _detailed_entry(diagnostic: Diagnostic) -> str:
    ref = diagnostic.reference
    lines = [
        f"Reference: {ref.raw}",
        f"  Position: {ref.start}..{ref.end}",
    ]
    if isinstance(ref, Reference):
        lines.append(f"  Force: {'yes' if ref.force else 'no'}")

    data = diagnostic.to_dict()
    if "path" in data:
        lines.append(f"  Path: {data['path']}")
        lines.append(f"  Exists: {'yes' if data.get('exists') else 'no'}")

    resolved = diagnostic.resolved
    if resolved is not None:
        if resolved.entry_kind.is_directory:
            lines.append("  Type: Directory")
        elif diagnostic.size is not None:
            lines.append(f"  Type: File ({diagnostic.size} bytes)")
        else:
            lines.append("  Type: File")

    if diagnostic.exclusion is not None and diagnostic.exclusion.rule is not None:
        lines.append(f"  Rule: {diagnostic.exclusion.describe()}")
    lines.append(f"  Outcome: {diagnostic.outcome.value}")
    if diagnostic.error is not None:
        lines.append(f"  Error: {diagnostic.error}")

    return "\n".join(lines) + "\n"

# -----------------------------------------------------------------------------
# DRY-RUN MODE
# -----------------------------------------------------------------------------

def format_dry_run(diagnostics: List[Diagnostic]) -> str:
    """
    Render one check line per reference followed by a summary.

    Skipped (excluded) references count as valid; they are policy, not
    faults.
    """
    lines: List[str] = []
    valid = invalid = 0

    for d in diagnostics:
        raw = d.reference.raw
        if d.outcome is Outcome.FAILED:
            invalid += 1
            lines.append(f"✗ {raw} -> Error: {d.error}")
            continue
        valid += 1
        target = d.resolved.path if d.resolved is not None else ""
        if d.outcome is Outcome.SKIPPED:
            lines.append(f"✓ {raw} -> {target} (skipped: {d.reason})")
        else:
            lines.append(f"✓ {raw} -> {target}")

    lines.append("")
    lines.append(f"Summary: {len(diagnostics)} references found")
    if valid:
        lines.append(f"  ✓ {valid} valid")
    if invalid:
        lines.append(f"  ✗ {invalid} invalid")
    return "\n".join(lines)
