from __future__ import annotations

"""
Token Estimation Service.

Estimates how many model tokens an expanded document will occupy. Uses a
tiktoken BPE encoding when it can be loaded and falls back to a
character-density heuristic otherwise (offline machines cannot download
encoding files on first use).
"""

import logging
import math
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

import tiktoken

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN_AVG = 4
DEFAULT_ENCODING = "cl100k_base"

# -----------------------------------------------------------------------------
# STRATEGY INTERFACES
# -----------------------------------------------------------------------------

class TokenizerStrategy(ABC):
    """
    Abstract base class for token counting algorithms.
    """

    @abstractmethod
    def count(self, text: str) -> int:
        """
        Calculate the token count for a given text segment.

        Args:
            text: Input string to be tokenized.

        Returns:
            int: Total token count.
        """
        pass


class HeuristicStrategy(TokenizerStrategy):
    """
    Fallback algorithm using character density estimation.
    """

    def count(self, text: str) -> int:
        """Estimate tokens using the characters-to-token ratio."""
        if not text:
            return 0
        return math.ceil(len(text) / CHARS_PER_TOKEN_AVG)


class TiktokenStrategy(TokenizerStrategy):
    """
    Local BPE encoding via tiktoken.

    Args:
        encoding_name: tiktoken encoding to load.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        self.encoding_name = encoding_name

    def count(self, text: str) -> int:
        encoding = _load_encoding(self.encoding_name)
        return len(encoding.encode(text, disallowed_special=()))


@lru_cache(maxsize=4)
def _load_encoding(name: str) -> Any:
    return tiktoken.get_encoding(name)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def count_tokens(text: str, encoding_name: str = DEFAULT_ENCODING) -> int:
    """
    Estimate the number of tokens in a text.

    Args:
        text: Input string content.
        encoding_name: tiktoken encoding used for exact counting.

    Returns:
        int: Token count, exact when the encoding loads, estimated otherwise.
    """
    if not text:
        return 0

    try:
        return TiktokenStrategy(encoding_name).count(text)
    except Exception as e:
        logger.warning(f"Tokenizer '{encoding_name}' unavailable: {e}. Using heuristic estimate.")
        return HeuristicStrategy().count(text)
