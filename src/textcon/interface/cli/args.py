from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema (help messages, argument types
and defaults) and translates the parsed namespace into configuration
overrides for the validation stage.
"""

import argparse
from typing import Any, Dict, List, Optional

from textcon.domain.constants import APP_NAME, APP_VERSION, BASE_DIR_ENV_VAR

LIST_FORMATS = ("plain", "detailed", "json")
OUTPUT_FORMATS = ("plain", "markdown", "html")

REFERENCE_HELP = """\
reference syntax:
  {{ @file.txt }}      include file contents (max 64 KiB)
  {{ @!file.txt }}     force include a larger file
  {{ @dirname/ }}      include the directory tree
  {{ @!dirname/ }}     include the tree and every file below it
  {{ @. }}             include the tree of the base directory

examples:
  textcon --template prompt.md -o context.md
  textcon src/main.py src/util/
  echo "Code: {{ @main.py }}" | textcon --template -
  textcon --template prompt.md --list=json
"""

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the textcon CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Expand {{ @path }} references in a text template into file contents and directory trees.",
        epilog=REFERENCE_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # --- Template Sources ---
    p.add_argument(
        "inputs",
        nargs="*",
        metavar="INPUTS",
        help="Files and directories to stitch together (each is force-included).",
    )
    p.add_argument(
        "-t", "--template",
        default=None,
        metavar="TEMPLATE",
        help="Template file to process. Use '-' to read from stdin.",
    )

    # --- Path Management ---
    p.add_argument(
        "-b", "--base-dir",
        dest="base_dir",
        default=None,
        metavar="DIR",
        help=f"Base directory for resolving references (env: {BASE_DIR_ENV_VAR}, default: cwd).",
    )
    p.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help="Output file (defaults to stdout).",
    )

    # --- Expansion Limits ---
    p.add_argument(
        "-d", "--max-depth",
        dest="max_depth",
        type=int,
        default=None,
        metavar="DEPTH",
        help="Maximum depth of directory trees (default: 5).",
    )
    p.add_argument(
        "--no-depth-limit",
        action="store_true",
        help="Render directory trees without a depth limit.",
    )
    p.add_argument(
        "-s", "--max-file-size",
        dest="max_file_size",
        default=None,
        metavar="SIZE",
        help="Size limit for files included without '!', e.g. 65536, 64K, 1M.",
    )

    # --- Rendering Options ---
    p.add_argument(
        "--no-comments",
        action="store_true",
        help="Do not add path comments before files and trees.",
    )
    p.add_argument(
        "--inline",
        action="store_true",
        help="Inline file contents under every directory reference, not only forced ones.",
    )
    p.add_argument(
        "-f", "--format",
        choices=OUTPUT_FORMATS,
        default="plain",
        help="Output format of the expanded document.",
    )

    # --- Filtering ---
    p.add_argument(
        "-x", "--exclude",
        dest="exclude",
        action="append",
        default=None,
        metavar="GLOB",
        help="Exclude glob pattern, relative to the base directory (repeatable).",
    )
    p.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Ignore .gitignore rules.",
    )

    # --- Execution Modes ---
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate every reference without reading contents or writing output.",
    )
    mode.add_argument(
        "--list",
        dest="list_format",
        nargs="?",
        const="plain",
        default=None,
        choices=LIST_FORMATS,
        metavar="FORMAT",
        help="List the template's references (plain, detailed or json).",
    )
    mode.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )

    # --- Reporting ---
    p.add_argument(
        "--tokens",
        action="store_true",
        help="Report the estimated token count of the output on stderr.",
    )

    # --- Diagnostics ---
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only report errors.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        metavar="FILE",
        help="Also write logs to a rotating log file.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}",
    )

    return p


def check_sources(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Enforce that exactly one template source is given (exits with status 2)."""
    if args.dump_config:
        return
    if args.template is not None and args.inputs:
        parser.error("argument --template: not allowed with INPUTS")
    if args.template is None and not args.inputs:
        parser.error("either INPUTS or --template is required")

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace, base_dir: str) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.
        base_dir: Base directory already selected from flag/env/cwd.

    Returns:
        Dict[str, Any]: Raw values for validate_config.
    """
    overrides: Dict[str, Any] = {"base_dir": base_dir}

    if args.no_depth_limit:
        overrides["max_tree_depth"] = None
    elif args.max_depth is not None:
        overrides["max_tree_depth"] = args.max_depth

    if args.max_file_size is not None:
        overrides["max_file_size"] = args.max_file_size
    if args.no_comments:
        overrides["add_path_comments"] = False
    if args.inline:
        overrides["inline_contents"] = True
    if args.no_gitignore:
        overrides["respect_gitignore"] = False

    excludes = _flatten_patterns(args.exclude)
    if excludes:
        overrides["manual_excludes"] = excludes

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _flatten_patterns(values: Optional[List[str]]) -> List[str]:
    """Keep repeated -x values in order, dropping blanks."""
    if not values:
        return []
    return [v.strip() for v in values if v and v.strip()]
