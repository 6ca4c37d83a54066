from __future__ import annotations

"""
Template Expansion Engine.

Coordinates the expansion of one template:
1. Canonicalizes the base directory and builds the run's exclusion filter.
2. Parses the template into literal spans and placeholders.
3. Resolves, filters and renders each placeholder in template order.
4. Splices the produced fragments between the literal spans in one pass.

The same traversal backs the three execution modes. EXPAND stops at the
first failed placeholder; DRY_RUN and LIST never read file contents and
collect a diagnostic for every placeholder instead.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from textcon.core.analysis.tree_renderer import TreeRenderer
from textcon.core.filtering.exclusion import ExclusionFilter
from textcon.core.parsing.reference_parser import parse_template
from textcon.core.pipeline.components.reader import check_size, load_file, read_text
from textcon.core.resolution.path_resolver import base_relative, canonicalize_base_dir, resolve_reference_path
from textcon.domain.config import TemplateConfig
from textcon.domain.constants import (
    EXCLUDED_MARKER,
    FILES_SECTION_HEADER,
    INLINE_FILE_HEADING,
    TREE_HEADER,
)
from textcon.domain.errors import InvalidReferenceError, TextconError
from textcon.domain.reference_models import LiteralSpan, Reference, ReferenceIssue
from textcon.domain.result_models import (
    Diagnostic,
    ExpansionMode,
    ExpansionResult,
    Outcome,
    ResolvedPath,
)
from textcon.domain.tree_models import RenderedTree

logger = logging.getLogger(__name__)

IgnorePredicate = Callable[[str, bool], bool]


@dataclass(frozen=True)
class _RunContext:
    """Per-run state; never shared between runs."""
    base_dir: str
    exclusion: ExclusionFilter
    renderer: TreeRenderer
    mode: ExpansionMode

    @property
    def expanding(self) -> bool:
        return self.mode is ExpansionMode.EXPAND

# -----------------------------------------------------------------------------
# ENGINE
# -----------------------------------------------------------------------------

class ExpansionEngine:
    """
    Expands templates against one configuration.

    The engine holds no mutable state between runs; every call to run()
    re-canonicalizes the base directory and rebuilds its filters, so the
    output always reflects the filesystem at call time.

    Args:
        config: Options of the expansion.
        ignore_predicate: Optional replacement for the built-in .gitignore
                          reader, called as predicate(rel_path, is_dir).
    """

    def __init__(self, config: Optional[TemplateConfig] = None, ignore_predicate: Optional[IgnorePredicate] = None):
        self.config = config or TemplateConfig()
        self._ignore_predicate = ignore_predicate

    def run(self, template: str, mode: ExpansionMode = ExpansionMode.EXPAND) -> ExpansionResult:
        """
        Process a template in the given mode.

        Args:
            template: Template text.
            mode: EXPAND, DRY_RUN or LIST.

        Returns:
            ExpansionResult: Diagnostics for every placeholder, plus the
                             expanded document in EXPAND mode.

        Raises:
            TextconError: In EXPAND mode, the first placeholder failure with
                          its template location attached. In every mode, an
                          unusable base directory or exclude pattern.
        """
        ctx = self._start_run(mode)
        parsed = parse_template(template)
        result = ExpansionResult(mode=mode)
        fragments: List[str] = []

        for segment in parsed.segments:
            if isinstance(segment, LiteralSpan):
                if ctx.expanding:
                    fragments.append(segment.text)
                continue

            diagnostic, fragment = self._process(segment, ctx)
            result.diagnostics.append(diagnostic)

            if diagnostic.outcome is Outcome.FAILED and diagnostic.error is not None:
                diagnostic.error.attach(segment, template)
                if ctx.expanding:
                    logger.debug(f"Aborting expansion: {diagnostic.error}")
                    raise diagnostic.error
                logger.warning(f"{segment.raw}: {diagnostic.error.message}")

            if ctx.expanding:
                fragments.append(fragment)

        if ctx.expanding:
            result.output = "".join(fragments)

        logger.info(
            f"{mode.value}: {len(result.diagnostics)} references, "
            f"{len(result.included)} included, {len(result.skipped)} skipped, "
            f"{len(result.failures)} failed"
        )
        return result

    # -------------------------------------------------------------------------
    # Run setup
    # -------------------------------------------------------------------------

    def _start_run(self, mode: ExpansionMode) -> _RunContext:
        cfg = self.config
        base_dir = canonicalize_base_dir(cfg.base_dir)
        exclusion = ExclusionFilter(
            base_dir,
            respect_gitignore=cfg.respect_gitignore,
            manual_excludes=cfg.manual_excludes,
            ignore_predicate=self._ignore_predicate,
        )
        renderer = TreeRenderer(base_dir, exclusion, cfg.max_tree_depth)
        logger.debug(f"Run started in {mode.value} mode, base directory '{base_dir}'")
        return _RunContext(base_dir=base_dir, exclusion=exclusion, renderer=renderer, mode=mode)

    # -------------------------------------------------------------------------
    # Per-placeholder processing
    # -------------------------------------------------------------------------

    def _process(self, ref: Union[Reference, ReferenceIssue], ctx: _RunContext) -> Tuple[Diagnostic, str]:
        """Produce the diagnostic and the emitted fragment of one placeholder."""
        if isinstance(ref, ReferenceIssue):
            return Diagnostic(ref, Outcome.FAILED, error=InvalidReferenceError(f"Invalid reference: {ref.message}")), ""

        try:
            resolved = resolve_reference_path(ref.path, ctx.base_dir, ref.kind)
        except TextconError as e:
            return Diagnostic(ref, Outcome.FAILED, error=e), ""

        logger.debug(f"{ref.raw} -> {resolved.path} ({resolved.entry_kind.value})")

        is_dir = resolved.entry_kind.is_directory
        target_rel = base_relative(resolved.path, ctx.base_dir)
        decision = ctx.exclusion.decide_linked(resolved.rel_path, target_rel, is_dir)
        if decision.excluded:
            logger.info(f"Skipped {ref.raw}: {decision.describe()}")
            fragment = ""
            if ctx.expanding and self.config.add_path_comments:
                fragment = EXCLUDED_MARKER.format(path=resolved.rel_path, rule=decision.rule)
            return Diagnostic(ref, Outcome.SKIPPED, resolved=resolved, exclusion=decision), fragment

        size: Optional[int] = None
        try:
            if is_dir:
                fragment = self._expand_directory(ref, resolved, ctx)
            elif ctx.expanding:
                fragment = load_file(
                    resolved.path,
                    resolved.rel_path,
                    self.config.max_file_size,
                    force=ref.force,
                    add_header=self.config.add_path_comments,
                )
            else:
                fragment = ""
                size = check_size(resolved.path, self.config.max_file_size, ref.force)
        except TextconError as e:
            return Diagnostic(ref, Outcome.FAILED, error=e, resolved=resolved, exclusion=decision), ""

        return Diagnostic(ref, Outcome.INCLUDED, resolved=resolved, exclusion=decision, size=size), fragment

    def _expand_directory(self, ref: Reference, resolved: ResolvedPath, ctx: _RunContext) -> str:
        """
        Render a directory reference, inlining its files when requested.

        Outside EXPAND mode only the checks run (listing and size ceilings),
        no file is opened.
        """
        tree = ctx.renderer.render(resolved, force=ref.force)
        inline = ref.force or self.config.inline_contents

        if not ctx.expanding:
            if inline:
                for entry in tree.files:
                    check_size(entry.path, self.config.max_file_size, ref.force)
            return ""

        parts: List[str] = []
        if self.config.add_path_comments:
            parts.append(TREE_HEADER.format(path=resolved.rel_path) + "\n")
        parts.append(tree.text + "\n")

        if inline:
            parts.append("\n")
            parts.append(self._inline_files(tree, resolved, ref.force))

        return "".join(parts)

    def _inline_files(self, tree: RenderedTree, resolved: ResolvedPath, force: bool) -> str:
        """Emit every listed file as a heading plus fenced block, in tree order."""
        parts: List[str] = []
        if self.config.add_path_comments:
            parts.append(FILES_SECTION_HEADER.format(path=resolved.rel_path) + "\n\n")

        for entry in tree.files:
            check_size(entry.path, self.config.max_file_size, force)
            content = read_text(entry.path)
            if content.endswith("\n"):
                content = content[:-1]
            fence = _fence_for(content)
            heading = INLINE_FILE_HEADING.format(path=entry.rel_path)
            parts.append(f"{heading}\n\n{fence}\n{content}\n{fence}\n\n")

        logger.debug(f"Inlined {len(tree.files)} files below '{resolved.rel_path}'")
        return "".join(parts)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_expansion(
        template: str,
        config: Optional[TemplateConfig] = None,
        mode: ExpansionMode = ExpansionMode.EXPAND,
        ignore_predicate: Optional[IgnorePredicate] = None,
) -> ExpansionResult:
    """Run the engine once in the requested mode."""
    return ExpansionEngine(config, ignore_predicate).run(template, mode)


def expand_template(template: str, config: Optional[TemplateConfig] = None) -> str:
    """
    Expand every placeholder of a template.

    Args:
        template: Template text.
        config: Options of the run (defaults when omitted).

    Returns:
        str: The expanded document.

    Raises:
        TextconError: The first failing placeholder, located in the template.
    """
    result = run_expansion(template, config, ExpansionMode.EXPAND)
    return result.output or ""


def check_template(template: str, config: Optional[TemplateConfig] = None) -> ExpansionResult:
    """Validate every placeholder without reading file contents."""
    return run_expansion(template, config, ExpansionMode.DRY_RUN)


def list_references(template: str, config: Optional[TemplateConfig] = None) -> List[Diagnostic]:
    """Return the per-placeholder diagnostic records of a template."""
    return run_expansion(template, config, ExpansionMode.LIST).diagnostics


def expand_template_file(path: Union[str, os.PathLike], config: Optional[TemplateConfig] = None) -> str:
    """
    Read a template file and expand it.

    The template is decoded as UTF-8 with invalid sequences replaced.
    """
    template = read_text(os.fspath(path))
    return expand_template(template, config)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _fence_for(content: str) -> str:
    """Return a backtick fence longer than any backtick run in the content."""
    longest = run = 0
    for ch in content:
        if ch == "`":
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return "`" * max(3, longest + 1)
