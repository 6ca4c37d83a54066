from __future__ import annotations

"""
Unit tests for the Directory Tree Renderer.

Verifies deterministic ordering and glyphs, depth limiting with force
bypass, exclusion pruning, hidden entries, symlink handling and listing
errors.
"""

import os
from pathlib import Path

import pytest

from textcon.core.analysis.tree_renderer import TreeRenderer
from textcon.core.filtering.exclusion import ExclusionFilter
from textcon.core.resolution.path_resolver import canonicalize_base_dir
from textcon.domain.errors import ReadError
from textcon.domain.result_models import EntryKind, ResolvedPath

needs_symlinks = pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="symlinks required")


@pytest.fixture
def base(tmp_path: Path) -> str:
    """
    /base
      .hidden
      a/
        inner/
          deep.txt
        z.txt
      b.txt
      c.md
    """
    root = tmp_path / "base"
    (root / "a" / "inner").mkdir(parents=True)
    (root / "a" / "inner" / "deep.txt").write_text("d", encoding="utf-8")
    (root / "a" / "z.txt").write_text("z", encoding="utf-8")
    (root / "b.txt").write_text("b", encoding="utf-8")
    (root / "c.md").write_text("c", encoding="utf-8")
    (root / ".hidden").write_text("h", encoding="utf-8")
    return canonicalize_base_dir(str(root))


def _root(base: str) -> ResolvedPath:
    return ResolvedPath(path=base, rel_path=".", entry_kind=EntryKind.DIRECTORY)


def _renderer(base: str, depth=None, excludes=()) -> TreeRenderer:
    return TreeRenderer(base, ExclusionFilter(base, respect_gitignore=False, manual_excludes=excludes), depth)


def test_full_tree_layout(base):
    tree = _renderer(base).render(_root(base))

    assert tree.lines == [
        ".",
        "├── a/",
        "│   ├── inner/",
        "│   │   └── deep.txt",
        "│   └── z.txt",
        "├── b.txt",
        "└── c.md",
    ]
    assert [f.rel_path for f in tree.files] == ["a/inner/deep.txt", "a/z.txt", "b.txt", "c.md"]


def test_hidden_entries_are_not_listed(base):
    tree = _renderer(base).render(_root(base))
    assert not any(".hidden" in line for line in tree.lines)


def test_subdirectory_root_label(base):
    sub = ResolvedPath(path=os.path.join(base, "a"), rel_path="a", entry_kind=EntryKind.DIRECTORY)
    tree = _renderer(base).render(sub)

    assert tree.lines[0] == "a/"
    assert tree.files[-1].rel_path == "a/z.txt"


def test_depth_limit_omits_deeper_entries(base):
    tree = _renderer(base, depth=1).render(_root(base))

    assert tree.lines == [".", "├── a/", "├── b.txt", "└── c.md"]
    assert all(entry.depth <= 1 for entry in tree.files)


def test_depth_zero_renders_only_the_root(base):
    assert _renderer(base, depth=0).render(_root(base)).lines == ["."]


def test_force_bypasses_depth_limit(base):
    limited = _renderer(base, depth=1)
    assert "│   │   └── deep.txt" in limited.render(_root(base), force=True).lines


def test_excluded_directories_are_pruned(base):
    tree = _renderer(base, excludes=["inner"]).render(_root(base))

    assert "│   ├── inner/" not in tree.lines
    assert all("deep.txt" not in line for line in tree.lines)
    assert tree.lines[-1] == "└── c.md"


def test_rendering_is_deterministic(base):
    renderer = _renderer(base)
    assert renderer.render(_root(base)) == renderer.render(_root(base))


@needs_symlinks
def test_symlink_cycle_is_listed_but_not_followed(base):
    os.symlink(os.path.join(base, "a"), os.path.join(base, "a", "loop"))
    tree = _renderer(base).render(_root(base))

    assert "│   ├── loop/" in tree.lines
    assert sum(1 for line in tree.lines if line.endswith("z.txt")) == 1


@needs_symlinks
def test_symlinks_leaving_the_base_are_hidden(base, tmp_path: Path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("s", encoding="utf-8")
    os.symlink(outside, os.path.join(base, "escape"))
    os.symlink(os.path.join(base, "missing"), os.path.join(base, "broken"))

    lines = _renderer(base).render(_root(base)).lines

    assert not any("escape" in line or "broken" in line for line in lines)


@needs_symlinks
def test_aliases_of_excluded_entries_are_hidden(base):
    os.symlink(os.path.join(base, "b.txt"), os.path.join(base, "alias.txt"))
    os.symlink(os.path.join(base, "a", "inner"), os.path.join(base, "shortcut"))

    tree = _renderer(base, excludes=("b.txt", "/a/inner")).render(_root(base))

    assert not any("alias.txt" in line or "shortcut" in line for line in tree.lines)
    assert [e.rel_path for e in tree.files] == ["a/z.txt", "c.md"]


def test_unreadable_root_raises_read_error(base):
    ghost = ResolvedPath(path=os.path.join(base, "ghost"), rel_path="ghost", entry_kind=EntryKind.DIRECTORY)
    with pytest.raises(ReadError):
        _renderer(base).render(ghost)
