from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, base directory and
configuration resolution, template acquisition (file, stdin or stitched
inputs), engine execution in the selected mode, and result rendering
with the documented exit codes.
"""

import json
import os
import sys
from typing import List, Optional

from textcon.core.pipeline.engine import expand_template, run_expansion
from textcon.core.pipeline.validator import validate_config
from textcon.core.processing.tokenizer import count_tokens
from textcon.core.resolution.path_resolver import canonicalize_base_dir
from textcon.domain.config import TemplateConfig
from textcon.domain.errors import ConfigurationError, TextconError
from textcon.domain.result_models import ExpansionMode
from textcon.infra.fs import read_template, relative_to_base, select_base_dir, write_output
from textcon.infra.logging import LoggingConfig, configure_logging, get_logger, level_for_verbosity
from textcon.interface.cli import args as cli_args
from textcon.interface.cli.formatters import format_document, format_dry_run, format_list

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 on expansion failure or invalid references,
             2 on usage or configuration errors, 130 on interrupt.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)
    cli_args.check_sources(parser, args)

    # 2. Logging bootstrap
    level = level_for_verbosity(args.verbose, args.quiet)
    configure_logging(LoggingConfig(level=level, console=True, log_file=args.log_file))
    logger.debug("CLI execution initiated.")

    # 3. Configuration resolution
    base_dir = select_base_dir(args.base_dir)
    try:
        config, warnings = validate_config(cli_args.args_to_overrides(args, base_dir), strict=False)
    except ConfigurationError as e:
        return _fail(str(e), EXIT_USAGE)

    for w in warnings:
        logger.warning(f"Configuration: {w}")

    if args.dump_config:
        print(json.dumps(config.to_dict(), ensure_ascii=False, indent=2))
        return EXIT_OK

    try:
        canonical_base = canonicalize_base_dir(config.base_dir)
    except TextconError as e:
        return _fail(str(e), EXIT_USAGE)

    # 4. Template acquisition
    try:
        template = _load_template(args, canonical_base)
    except OSError as e:
        return _fail(f"Cannot read template: {e}", EXIT_USAGE)

    # 5. Engine execution
    try:
        if args.list_format:
            return _run_list(template, config, args.list_format)
        if args.dry_run:
            return _run_dry(template, config)
        output = expand_template(template, config)
    except KeyboardInterrupt:
        return _fail("Interrupted.", EXIT_INTERRUPTED)
    except ConfigurationError as e:
        return _fail(str(e), EXIT_USAGE)
    except TextconError as e:
        logger.debug(f"Expansion failed with {e.kind}")
        return _fail(str(e), EXIT_FAILURE)

    # 6. Output rendering
    try:
        write_output(format_document(output, args.format), args.output)
    except OSError as e:
        return _fail(f"Cannot write output: {e}", EXIT_FAILURE)

    if args.output:
        logger.info(f"Output written to {args.output}")
    if args.tokens:
        print(f"Estimated tokens: {count_tokens(output):,}", file=sys.stderr)

    return EXIT_OK

# -----------------------------------------------------------------------------
# MODE HANDLERS
# -----------------------------------------------------------------------------

def _run_list(template: str, config: TemplateConfig, fmt: str) -> int:
    result = run_expansion(template, config, ExpansionMode.LIST)
    report = format_list(result.diagnostics, fmt)
    if report:
        print(report)
    return EXIT_OK if result.ok else EXIT_FAILURE


def _run_dry(template: str, config: TemplateConfig) -> int:
    result = run_expansion(template, config, ExpansionMode.DRY_RUN)
    print(format_dry_run(result.diagnostics))
    return EXIT_OK if result.ok else EXIT_FAILURE

# -----------------------------------------------------------------------------
# TEMPLATE SOURCES
# -----------------------------------------------------------------------------

def _load_template(args, base_dir: str) -> str:
    """Read --template, or synthesize a template from stitching inputs."""
    if args.template is not None:
        source = "stdin" if args.template == "-" else args.template
        logger.info(f"Reading template from {source}")
        return read_template(args.template)

    logger.info("Synthesizing template from inputs")
    return synthesize_template(args.inputs, base_dir)


def synthesize_template(inputs: List[str], base_dir: str) -> str:
    """
    Build a template of forced references, one per input line.

    Directories get a trailing '/' so they expand to a tree plus contents.
    """
    lines: List[str] = []
    for item in inputs:
        rel = relative_to_base(item, base_dir)
        is_dir = os.path.isdir(os.path.join(base_dir, rel))
        suffix = "/" if is_dir and not rel.endswith("/") else ""
        lines.append(f"{{{{ @!{rel}{suffix} }}}}\n")
    return "".join(lines)

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _fail(message: str, code: int) -> int:
    print(f"textcon: error: {message}", file=sys.stderr)
    return code


if __name__ == "__main__":
    sys.exit(main())
