"""Tests for text utility functions."""

from __future__ import annotations

import pytest

from findreplace.utils.text import (
    EmptySearchError,
    count_occurrences,
    normalize_replacement,
    normalize_search,
    replace_literal,
)


class TestCountOccurrences:
    """Test count_occurrences function."""

    def test_simple_count(self) -> None:
        assert count_occurrences("foo bar foo baz foo", "foo") == 3

    def test_no_match(self) -> None:
        assert count_occurrences("hello world", "xyz") == 0

    def test_empty_needle_never_matches(self) -> None:
        """An empty search text always counts zero."""
        assert count_occurrences("anything", "") == 0
        assert count_occurrences("", "") == 0

    def test_overlapping_candidates_counted_once(self) -> None:
        """Scanning resumes after the end of each match."""
        assert count_occurrences("aaaa", "aa") == 2
        assert count_occurrences("aaa", "aa") == 1
        assert count_occurrences("abababa", "aba") == 2

    def test_case_sensitive(self) -> None:
        assert count_occurrences("Foo foo FOO", "foo") == 1

    def test_multiline(self) -> None:
        assert count_occurrences("foo\nfoo\r\nfoo", "foo") == 3


class TestReplaceLiteral:
    """Test replace_literal function."""

    def test_replace_all(self) -> None:
        assert replace_literal("the cat and the cat", "cat", "dog") == "the dog and the dog"

    def test_empty_replacement_deletes(self) -> None:
        assert replace_literal("a-b-c", "-", "") == "abc"

    def test_empty_needle_is_noop(self) -> None:
        assert replace_literal("text", "", "x") == "text"

    def test_agrees_with_count_on_overlaps(self) -> None:
        """Preview count equals the number of replacements performed."""
        for text, needle in (("aaaa", "aa"), ("aaaaa", "aa"), ("abababa", "aba")):
            count = count_occurrences(text, needle)
            result = replace_literal(text, needle, "#")
            assert result.count("#") == count

    def test_count_matches_replacements(self) -> None:
        """Replacement count equals the occurrence count when r is new."""
        text = "cat, cat and a caterpillar"
        result = replace_literal(text, "cat", "dog")

        assert count_occurrences(text, "cat") == 3
        assert count_occurrences(result, "dog") == 3
        assert count_occurrences(result, "cat") == 0

    def test_round_trip_for_disjoint_literals(self) -> None:
        """s -> r followed by r -> s restores the original."""
        text = "Old title\n\nSee Old title for details."
        forward = replace_literal(text, "Old title", "New name")

        assert replace_literal(forward, "New name", "Old title") == text


class TestNormalizeInput:
    """Test search and replacement normalisation."""

    def test_search_is_trimmed(self) -> None:
        assert normalize_search("  foo \n") == "foo"

    def test_search_newlines_removed(self) -> None:
        assert normalize_search("fo\r\no") == "foo"

    @pytest.mark.parametrize("value", ["", "   ", "\n", "\r\n "])
    def test_empty_search_rejected(self, value: str) -> None:
        with pytest.raises(EmptySearchError):
            normalize_search(value)

    def test_replacement_keeps_spaces(self) -> None:
        assert normalize_replacement(" bar ") == " bar "

    def test_replacement_newlines_removed(self) -> None:
        assert normalize_replacement("b\nar\r") == "bar"

    def test_replacement_none_is_empty(self) -> None:
        assert normalize_replacement(None) == ""
