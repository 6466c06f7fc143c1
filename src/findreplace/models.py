"""Core find & replace data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union


@dataclass(slots=True, frozen=True)
class WalkEntry:
    """Single traversal result: an eligible file or a skipped entry."""

    path: Path
    skipped: bool = False
    reason: str = ""

    @classmethod
    def skip(cls, path: Path, reason: str) -> "WalkEntry":
        return cls(path=path, skipped=True, reason=reason)


@dataclass(slots=True, frozen=True)
class FileArgument:
    path: Path
    # Name as given, before symlinks are resolved.
    given_name: str = field(default="", compare=False)


@dataclass(slots=True, frozen=True)
class DirectoryArgument:
    path: Path


@dataclass(slots=True, frozen=True)
class MissingArgument:
    raw: str


PathArgument = Union[FileArgument, DirectoryArgument, MissingArgument]


@dataclass(slots=True, frozen=True)
class DecodedDocument:
    """Text of a file together with the encoding it was read with."""

    path: Path
    text: str
    encoding: str


@dataclass(slots=True, frozen=True)
class MatchRecord:
    """File with at least one occurrence of the search text."""

    path: Path
    count: int
    encoding: str
    original: str

    def __post_init__(self) -> None:
        if self.count <= 0:
            raise ValueError("MatchRecord requires a positive occurrence count")


@dataclass(slots=True)
class ScanReport:
    files_scanned: int = 0
    matches: List[MatchRecord] = field(default_factory=list)
    unreadable: List[Path] = field(default_factory=list)

    @property
    def files_matched(self) -> int:
        return len(self.matches)

    @property
    def total_occurrences(self) -> int:
        return sum(record.count for record in self.matches)


@dataclass(slots=True, frozen=True)
class PreviewEntry:
    path: Path
    count: int


@dataclass(slots=True)
class Preview:
    """Capped, ranked view of a scan handed to the confirmation step."""

    entries: List[PreviewEntry]
    hidden_count: int
    files_matched: int
    total_occurrences: int
    unreadable_count: int


@dataclass(slots=True, frozen=True)
class WriteFailure:
    path: Path
    reason: str
    kind: str = "write"

    def describe(self) -> str:
        return f"{self.path}: {self.reason}"


@dataclass(slots=True)
class RunSummary:
    """Aggregate outcome of one resolve, scan and replace cycle."""

    files_scanned: int = 0
    files_matched: int = 0
    total_occurrences: int = 0
    files_changed: int = 0
    files_unchanged: int = 0
    replacements_written: int = 0
    unreadable: int = 0
    failures: List[WriteFailure] = field(default_factory=list)
    changed_files: List[Path] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def record_change(self, path: Path, count: int) -> None:
        self.files_changed += 1
        self.replacements_written += count
        self.changed_files.append(path)

    def record_failure(self, path: Path, reason: str, kind: str = "write") -> None:
        self.failures.append(WriteFailure(path=path, reason=reason, kind=kind))

    def failure_lines(self, limit: int = 10) -> List[str]:
        """Describe failures, capped at ``limit`` with a trailing "+N more" line."""
        lines = [failure.describe() for failure in self.failures[:limit]]
        if len(self.failures) > limit:
            lines.append(f"+{len(self.failures) - limit} more")
        return lines
