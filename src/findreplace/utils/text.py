"""Literal text matching helpers.

Counting and replacing share one definition of an occurrence: matches are
found left to right and scanning resumes after the end of each match, so
overlapping candidates are never counted twice.
"""

from __future__ import annotations


class EmptySearchError(ValueError):
    """Raised when the search text is empty after normalisation."""


def count_occurrences(haystack: str, needle: str) -> int:
    """Count non-overlapping literal occurrences of ``needle`` in ``haystack``."""
    if not needle:
        return 0

    count = 0
    start = haystack.find(needle)
    while start != -1:
        count += 1
        start = haystack.find(needle, start + len(needle))
    return count


def replace_literal(text: str, needle: str, replacement: str) -> str:
    """Replace every occurrence counted by :func:`count_occurrences`."""
    if not needle:
        return text
    return text.replace(needle, replacement)


def _strip_newlines(text: str) -> str:
    return text.replace("\r", "").replace("\n", "")


def normalize_search(text: str) -> str:
    """Clean up user-entered search text, rejecting empty input."""
    cleaned = _strip_newlines(text or "").strip()
    if not cleaned:
        raise EmptySearchError("Search text must not be empty")
    return cleaned


def normalize_replacement(text: str | None) -> str:
    """Clean up replacement text; an empty result means delete."""
    return _strip_newlines(text or "")
