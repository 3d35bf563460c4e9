"""
Text utilities for form input.

Used for multi-line URL fields and search terms.
"""

from typing import Optional


def split_lines(text: Optional[str]) -> list[str]:
    """
    Split multi-line input into trimmed, non-blank entries.

    - "a\\n\\n  b  \\n" → ["a", "b"]
    - "   " → []

    Args:
        text: Raw textarea content (may use \\r\\n line endings)

    Returns:
        Entries in original order
    """
    if not text:
        return []

    return [line.strip() for line in text.splitlines() if line.strip()]


def normalize_search_term(term: Optional[str]) -> str:
    """Trim a search box value; None becomes empty."""
    return (term or "").strip()
