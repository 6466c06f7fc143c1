"""Find & replace pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

from findreplace.ingestion.text_loader import DEFAULT_ENCODINGS, EncodeFailure, encode_text
from findreplace.models import MatchRecord, RunSummary, ScanReport
from findreplace.replace.scanner import Scanner
from findreplace.replace.targets import resolve_targets
from findreplace.utils.files import atomic_write_bytes
from findreplace.utils.text import EmptySearchError, replace_literal

LOGGER = logging.getLogger(__name__)


def summary_from_scan(report: ScanReport) -> RunSummary:
    return RunSummary(
        files_scanned=report.files_scanned,
        files_matched=report.files_matched,
        total_occurrences=report.total_occurrences,
        unreadable=len(report.unreadable),
    )


class ReplaceEngine:
    """Coordinates target resolution, scanning and rewriting."""

    def __init__(self, *, encodings: Sequence[str] = DEFAULT_ENCODINGS) -> None:
        self.scanner = Scanner(encodings=encodings)

    def resolve(self, inputs: Iterable[str | Path]) -> list[Path]:
        return resolve_targets(inputs)

    def scan(self, targets: Sequence[Path], needle: str) -> ScanReport:
        return self.scanner.scan(targets, needle)

    def apply(
        self,
        records: Iterable[MatchRecord],
        needle: str,
        replacement: str,
        *,
        summary: RunSummary | None = None,
    ) -> RunSummary:
        """Rewrite every matched file, isolating failures per file."""
        if not needle:
            raise EmptySearchError("Search text must not be empty")

        summary = summary if summary is not None else RunSummary()
        for record in records:
            status = self._apply_single(record, needle, replacement, summary)
            LOGGER.debug("%s: %s", record.path, status)

        LOGGER.info(
            "Changed %d files, %d replacements, %d failures",
            summary.files_changed,
            summary.replacements_written,
            summary.failed,
        )
        return summary

    def _apply_single(
        self, record: MatchRecord, needle: str, replacement: str, summary: RunSummary
    ) -> str:
        new_text = replace_literal(record.original, needle, replacement)
        if new_text == record.original:
            summary.files_unchanged += 1
            return "unchanged"

        try:
            data = encode_text(new_text, record.encoding)
        except EncodeFailure as exc:
            LOGGER.warning("Cannot save %s: %s", record.path, exc)
            summary.record_failure(record.path, str(exc), kind="encode")
            return "failed"

        try:
            atomic_write_bytes(record.path, data)
        except OSError as exc:
            LOGGER.warning("Failed to write %s: %s", record.path, exc)
            summary.record_failure(record.path, exc.strerror or str(exc), kind="write")
            return "failed"

        summary.record_change(record.path, record.count)
        return "changed"

    def run(self, inputs: Iterable[str | Path], needle: str, replacement: str) -> RunSummary:
        """Resolve, scan and replace without an interactive confirmation step."""
        if not needle:
            raise EmptySearchError("Search text must not be empty")
        report = self.scan(self.resolve(inputs), needle)
        summary = summary_from_scan(report)
        return self.apply(report.matches, needle, replacement, summary=summary)
