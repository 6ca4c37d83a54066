from __future__ import annotations

"""
Unit tests for the Template Reference Parser.

Verifies:
1. Placeholder grammar (force flag, directory marker, whitespace).
2. Path normalization equivalences.
3. Malformed placeholders are reported without stopping the scan.
4. Segments cover the source text exactly.
"""

import pytest

from textcon.core.parsing.reference_parser import (
    find_references,
    normalize_reference_path,
    parse_template,
)
from textcon.domain.reference_models import LiteralSpan, Reference, ReferenceIssue, ReferenceKind


def test_single_file_reference_span():
    """A lone placeholder becomes one Reference spanning the whole text."""
    parsed = parse_template("{{ @a.txt }}")

    assert len(parsed.segments) == 1
    ref = parsed.segments[0]
    assert isinstance(ref, Reference)
    assert (ref.start, ref.end) == (0, 12)
    assert ref.path == "a.txt"
    assert ref.raw == "@a.txt"
    assert ref.force is False
    assert ref.kind is ReferenceKind.FILE


def test_spans_are_offsets_in_source():
    text = "x {{ @a }} y"
    ref = find_references(text)[0]

    assert (ref.start, ref.end) == (2, 10)
    assert text[ref.start:ref.end] == ref.text


@pytest.mark.parametrize("written", ["@file.txt", "@/file.txt", "@./file.txt", "@.//file.txt"])
def test_leading_slash_and_dot_slash_are_equivalent(written):
    ref = find_references(f"{{{{ {written} }}}}")[0]
    assert ref.path == "file.txt"
    assert ref.kind is ReferenceKind.FILE


@pytest.mark.parametrize("written", ["@.", "@./", "@/"])
def test_base_directory_aliases(written):
    ref = find_references(f"{{{{ {written} }}}}")[0]
    assert ref.path == "."
    assert ref.is_base_dir
    assert ref.kind is ReferenceKind.DIRECTORY


def test_trailing_slash_marks_directory():
    ref = find_references("{{ @src/ }}")[0]
    assert ref.path == "src"
    assert ref.kind is ReferenceKind.DIRECTORY


def test_force_flag_and_whitespace_tolerance():
    refs = find_references("{{@!big.bin}} {{   @!  logs/pod.log   }}")

    assert [r.path for r in refs] == ["big.bin", "logs/pod.log"]
    assert all(r.force for r in refs)


def test_braces_without_sigil_are_literal_text():
    parsed = parse_template("Use {{ name }} here")

    assert parsed.placeholders == []
    assert parsed.segments == [LiteralSpan(0, 19, "Use {{ name }} here")]


def test_unterminated_placeholder_does_not_hide_later_references():
    """An unclosed '{{ @' stops at the next '{{'; that placeholder still parses."""
    text = "{{ @a.txt\n{{ @b.txt }}"
    parsed = parse_template(text)

    issue, ref = parsed.segments
    assert isinstance(issue, ReferenceIssue)
    assert (issue.start, issue.end) == (0, 10)
    assert "unterminated" in issue.message
    assert isinstance(ref, Reference)
    assert ref.path == "b.txt"


def test_unterminated_placeholder_at_end_of_text():
    issue, = parse_template("x {{ @a.txt\nmore").issues
    assert (issue.start, issue.end) == (2, 16)


@pytest.mark.parametrize(
    "text",
    ["{{\n  @a.txt\n}}", "{{ @a.txt\n}}", "{{\r\n\t@a.txt \r\n}}"],
)
def test_whitespace_around_reference_may_span_lines(text):
    parsed = parse_template(text)

    assert parsed.issues == []
    ref, = parsed.references
    assert (ref.start, ref.end) == (0, len(text))
    assert ref.raw == "@a.txt"
    assert ref.path == "a.txt"


def test_line_break_inside_path_is_rejected():
    issue, = parse_template("{{ @a\nb.txt }}").issues
    assert "disallowed" in issue.message


@pytest.mark.parametrize(
    "placeholder, fragment",
    [
        ("{{ @ }}", "empty path"),
        ("{{ @! }}", "empty path"),
        ("{{ @../etc/passwd }}", ".."),
        ("{{ @src/../../x }}", ".."),
        ("{{ @a{b }}", "disallowed"),
        ("{{ @a\tb }}", "disallowed"),
    ],
)
def test_malformed_placeholders_become_issues(placeholder, fragment):
    parsed = parse_template(f"before {placeholder} after")

    assert parsed.references == []
    assert len(parsed.issues) == 1
    assert fragment in parsed.issues[0].message
    assert parsed.issues[0].text == placeholder


def test_segments_cover_source_exactly():
    text = "# Title\r\n{{ @a.txt }}\n{{ @broken\nplain {{ x }} {{ @!src/ }}"
    parsed = parse_template(text)

    assert "".join(
        s.text for s in parsed.segments
    ) == text
    positions = [(s.start, s.end) for s in parsed.segments]
    assert positions[0][0] == 0
    assert positions[-1][1] == len(text)
    for (_, end), (start, _) in zip(positions, positions[1:]):
        assert end == start


def test_parsing_is_idempotent():
    text = "{{ @a }} {{ @!b/ }} {{ @ }} {{ @c"
    assert parse_template(text) == parse_template(text)


def test_duplicate_references_are_kept():
    refs = find_references("{{ @a.txt }}{{ @a.txt }}")
    assert len(refs) == 2
    assert refs[0].start != refs[1].start


def test_normalize_collapses_empty_and_dot_segments():
    assert normalize_reference_path("src//./lib/") == ("src/lib", ReferenceKind.DIRECTORY)
    assert normalize_reference_path("./a/./b.txt") == ("a/b.txt", ReferenceKind.FILE)


def test_normalize_rejects_empty():
    with pytest.raises(ValueError):
        normalize_reference_path("")
