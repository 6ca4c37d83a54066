from __future__ import annotations

"""
Unit tests for CLI Argument Definition and Mapping.
"""

import pytest

from textcon.infra.logging import level_for_verbosity
from textcon.interface.cli.args import args_to_overrides, build_parser, check_sources


def _parse(argv):
    parser = build_parser()
    args = parser.parse_args(argv)
    check_sources(parser, args)
    return args


def test_defaults():
    args = _parse(["--template", "prompt.md"])

    assert args.template == "prompt.md"
    assert args.inputs == []
    assert args.format == "plain"
    assert args.list_format is None
    assert args.dry_run is False
    assert args.verbose == 0
    assert args_to_overrides(args, "/base") == {"base_dir": "/base"}


def test_overrides_mapping():
    args = _parse([
        "src", "README.md",
        "-d", "3",
        "--no-comments",
        "-x", "*.log",
        "--exclude", "tmp/",
        "-x", "  ",
        "--no-gitignore",
        "--inline",
        "-s", "1M",
    ])
    overrides = args_to_overrides(args, "/base")

    assert args.inputs == ["src", "README.md"]
    assert overrides == {
        "base_dir": "/base",
        "max_tree_depth": 3,
        "add_path_comments": False,
        "manual_excludes": ["*.log", "tmp/"],
        "respect_gitignore": False,
        "inline_contents": True,
        "max_file_size": "1M",
    }


def test_no_depth_limit_wins_over_depth():
    args = _parse(["-t", "x", "-d", "2", "--no-depth-limit"])
    assert args_to_overrides(args, "/b")["max_tree_depth"] is None


def test_list_format_is_optional():
    assert _parse(["-t", "x", "--list"]).list_format == "plain"
    assert _parse(["-t", "x", "--list=json"]).list_format == "json"
    assert _parse(["-t", "x", "--list", "detailed"]).list_format == "detailed"


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["a.txt", "--template", "t.md"],
        ["-t", "x", "--dry-run", "--list"],
        ["-t", "x", "--list=yaml"],
        ["-t", "x", "-v", "-q"],
        ["-t", "x", "-f", "pdf"],
    ],
)
def test_usage_errors_exit_with_status_2(argv):
    with pytest.raises(SystemExit) as exc_info:
        _parse(argv)
    assert exc_info.value.code == 2


def test_dump_config_needs_no_template():
    assert _parse(["--dump-config"]).dump_config is True


@pytest.mark.parametrize(
    "verbose, quiet, level",
    [(0, False, "WARNING"), (1, False, "INFO"), (2, False, "DEBUG"), (5, False, "DEBUG"), (0, True, "ERROR")],
)
def test_verbosity_levels(verbose, quiet, level):
    assert level_for_verbosity(verbose, quiet) == level


def test_verbose_flag_counts():
    assert _parse(["-t", "x", "-vv"]).verbose == 2
