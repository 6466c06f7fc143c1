"""Tests for occurrence scanning and preview ranking."""

from __future__ import annotations

from pathlib import Path

import pytest

from findreplace.models import DecodedDocument, MatchRecord, ScanReport
from findreplace.replace.scanner import Scanner, build_preview, rank_matches, scan_document
from findreplace.replace.targets import resolve_targets
from findreplace.utils.text import EmptySearchError


def _record(path: str, count: int) -> MatchRecord:
    return MatchRecord(path=Path(path), count=count, encoding="utf-8", original="x")


class TestScanDocument:
    """Test scan_document function."""

    def test_match(self) -> None:
        document = DecodedDocument(path=Path("/notes.md"), text="foo bar foo", encoding="cp1252")

        record = scan_document(document, "foo")

        assert record is not None
        assert record.count == 2
        assert record.encoding == "cp1252"
        assert record.original == "foo bar foo"

    def test_no_match_returns_none(self) -> None:
        document = DecodedDocument(path=Path("/notes.md"), text="bar", encoding="utf-8")

        assert scan_document(document, "foo") is None


class TestRankMatches:
    """Test preview ordering."""

    def test_count_descending_then_path(self) -> None:
        records = [_record("/b.md", 2), _record("/c.md", 5), _record("/a.md", 2)]

        ranked = rank_matches(records)

        assert [str(r.path) for r in ranked] == ["/c.md", "/a.md", "/b.md"]

    def test_build_preview_caps_entries(self) -> None:
        report = ScanReport(
            files_scanned=4,
            matches=[_record(f"/{name}.md", 1) for name in "dcba"],
            unreadable=[Path("/broken.txt")],
        )

        preview = build_preview(report, limit=2)

        assert [str(e.path) for e in preview.entries] == ["/a.md", "/b.md"]
        assert preview.hidden_count == 2
        assert preview.files_matched == 4
        assert preview.total_occurrences == 4
        assert preview.unreadable_count == 1

    def test_build_preview_under_limit(self) -> None:
        report = ScanReport(files_scanned=1, matches=[_record("/a.md", 3)])

        preview = build_preview(report)

        assert preview.hidden_count == 0
        assert len(preview.entries) == 1


class TestScanner:
    """Test Scanner over real files."""

    def test_scenario_with_pruned_git_directory(self, tmp_path: Path) -> None:
        """Only notes.md is scanned; the .git copy is never seen."""
        (tmp_path / "ignore" / ".git").mkdir(parents=True)
        (tmp_path / "notes.md").write_text("foo foo foo")
        (tmp_path / "ignore" / ".git" / "readme.md").write_text("foo " * 5)

        report = Scanner().scan(resolve_targets([str(tmp_path)]), "foo")

        assert report.files_scanned == 1
        assert report.files_matched == 1
        assert report.total_occurrences == 3

    def test_files_without_matches_not_recorded(self, tmp_path: Path) -> None:
        (tmp_path / "a.md").write_text("foo")
        (tmp_path / "b.md").write_text("bar")

        report = Scanner().scan(resolve_targets([str(tmp_path)]), "foo")

        assert report.files_scanned == 2
        assert [r.path.name for r in report.matches] == ["a.md"]

    def test_undecodable_file_counted_once(self, tmp_path: Path) -> None:
        """Unreadable files are excluded from matches and counted once."""
        bad = tmp_path / "bad.txt"
        bad.write_bytes(b"foo caf\xe9")
        (tmp_path / "good.md").write_text("foo")

        scanner = Scanner(encodings=("utf-8", "ascii"))
        report = scanner.scan(resolve_targets([str(tmp_path)]), "foo")

        assert report.unreadable == [bad.resolve()]
        assert [r.path.name for r in report.matches] == ["good.md"]

    def test_matches_are_ranked(self, tmp_path: Path) -> None:
        (tmp_path / "one.md").write_text("foo")
        (tmp_path / "three.md").write_text("foo foo foo")

        report = Scanner().scan(resolve_targets([str(tmp_path)]), "foo")

        assert [r.path.name for r in report.matches] == ["three.md", "one.md"]

    def test_empty_search_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(EmptySearchError):
            Scanner().scan([tmp_path / "a.md"], "")
