from __future__ import annotations

"""
Domain Constants.

Centralizes defaults shared by the configuration model, the engine and
the CLI, together with the fixed text of the emitted headers.
"""

APP_NAME = "textcon"
APP_VERSION = "0.4.0"

# Size ceiling before the '@!' force syntax is required (64 KiB)
MAX_FILE_SIZE = 64 * 1024
DEFAULT_TREE_DEPTH = 5

BASE_DIR_ENV_VAR = "TEXTCON_BASE_DIR"

# -----------------------------------------------------------------------------
# PLACEHOLDER GRAMMAR
# -----------------------------------------------------------------------------

OPEN_DELIMITER = "{{"
CLOSE_DELIMITER = "}}"
REFERENCE_SIGIL = "@"
FORCE_MARKER = "!"

# -----------------------------------------------------------------------------
# OUTPUT DECORATION
# -----------------------------------------------------------------------------

FILE_HEADER = "<!-- File: {path} -->"
TREE_HEADER = "<!-- Directory tree: {path} -->"
FILES_SECTION_HEADER = "<!-- Files in {path} -->"
EXCLUDED_MARKER = "<!-- Excluded: {path} ({rule}) -->"
INLINE_FILE_HEADING = "### {path}"

TREE_BRANCH = "├── "
TREE_LAST_BRANCH = "└── "
TREE_PIPE = "│   "
TREE_SPACE = "    "
