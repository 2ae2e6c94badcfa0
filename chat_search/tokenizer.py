"""Text tokenization shared by the index builder and the fuzzy matcher."""

from __future__ import annotations

import re

_NON_WORD_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Split text into lowercase search tokens.

    Punctuation becomes whitespace and tokens of a single character are
    dropped. Order and duplicates are preserved.

    Examples:
        "Python's array-tricks!" → ['python', 'array', 'tricks']
        "a b cd" → ['cd']

    Args:
        text: Raw text to tokenize.

    Returns:
        List of normalized tokens.
    """
    if not text:
        return []
    cleaned = _NON_WORD_RE.sub(" ", text.lower())
    return [token for token in cleaned.split() if len(token) > 1]
