"""Occurrence scanning and preview ranking."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from findreplace.ingestion.text_loader import DEFAULT_ENCODINGS, DecodeFailure, decode_file
from findreplace.models import DecodedDocument, MatchRecord, Preview, PreviewEntry, ScanReport
from findreplace.utils.text import EmptySearchError, count_occurrences

LOGGER = logging.getLogger(__name__)


def scan_document(document: DecodedDocument, needle: str) -> Optional[MatchRecord]:
    """Return a MatchRecord when ``needle`` occurs in the document."""
    count = count_occurrences(document.text, needle)
    if count == 0:
        return None
    return MatchRecord(
        path=document.path,
        count=count,
        encoding=document.encoding,
        original=document.text,
    )


def rank_matches(records: Iterable[MatchRecord]) -> List[MatchRecord]:
    """Most matches first, ties broken by path."""
    return sorted(records, key=lambda record: (-record.count, str(record.path)))


def build_preview(report: ScanReport, limit: int = 150) -> Preview:
    ranked = rank_matches(report.matches)
    shown = ranked[: max(limit, 0)]
    return Preview(
        entries=[PreviewEntry(path=record.path, count=record.count) for record in shown],
        hidden_count=len(ranked) - len(shown),
        files_matched=report.files_matched,
        total_occurrences=report.total_occurrences,
        unreadable_count=len(report.unreadable),
    )


class Scanner:
    """Decodes candidate files and collects those containing the search text."""

    def __init__(self, *, encodings: Sequence[str] = DEFAULT_ENCODINGS) -> None:
        self.encodings = tuple(encodings)

    def scan(self, paths: Sequence[Path], needle: str) -> ScanReport:
        if not needle:
            raise EmptySearchError("Search text must not be empty")

        report = ScanReport()
        for path in paths:
            report.files_scanned += 1
            try:
                document = decode_file(path, self.encodings)
            except DecodeFailure as exc:
                LOGGER.warning("Unreadable file %s: %s", path, exc.reason)
                report.unreadable.append(path)
                continue

            record = scan_document(document, needle)
            if record is not None:
                LOGGER.debug("%d matches in %s", record.count, path)
                report.matches.append(record)

        report.matches = rank_matches(report.matches)
        LOGGER.info(
            "Scanned %d files: %d matched, %d occurrences, %d unreadable",
            report.files_scanned,
            report.files_matched,
            report.total_occurrences,
            len(report.unreadable),
        )
        return report
