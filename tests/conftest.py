from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared on-disk project fixtures and configuration factories.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from textcon.domain.config import TemplateConfig  # noqa: E402

# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Create a small project tree used across tests.

    Structure:
    /project
      README.md
      a.txt            ("hi")
      .env             (hidden)
      /src
        a.txt          ("A\\n")
        b.txt          ("B\\n")
        secret.txt     ("S\\n")
        /nested
          deep.txt     ("D\\n")
      /docs
        guide.md
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "README.md").write_text("# Demo\n", encoding="utf-8")
    (root / "a.txt").write_text("hi", encoding="utf-8")
    (root / ".env").write_text("TOKEN=1\n", encoding="utf-8")

    src = root / "src"
    src.mkdir()
    (src / "a.txt").write_text("A\n", encoding="utf-8")
    (src / "b.txt").write_text("B\n", encoding="utf-8")
    (src / "secret.txt").write_text("S\n", encoding="utf-8")
    (src / "nested").mkdir()
    (src / "nested" / "deep.txt").write_text("D\n", encoding="utf-8")

    docs = root / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text("Guide\n", encoding="utf-8")

    return root


@pytest.fixture
def make_config(project: Path) -> Callable[..., TemplateConfig]:
    """
    Return a factory of TemplateConfig values rooted at the project fixture.

    Keyword arguments override individual fields.
    """
    def _factory(**overrides: Any) -> TemplateConfig:
        base = TemplateConfig(base_dir=str(project))
        return base.with_overrides(**overrides) if overrides else base

    return _factory
