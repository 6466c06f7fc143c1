"""Application configuration defaults."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from findreplace.ingestion.text_loader import DEFAULT_ENCODINGS


def _get_default_history_path() -> Path:
    """Get the default history database path based on execution context."""
    user_db = Path.home() / "Documents" / "FindReplace" / "history.db"

    # Frozen apps have no meaningful working directory
    if getattr(sys, "frozen", False):
        return user_db

    # When running from source, prefer local data/ if it exists
    local_db = Path("data/history.db")
    if local_db.exists():
        return local_db

    return user_db


@dataclass(slots=True)
class AppConfig:
    history_path: Path | None = None
    encodings: Tuple[str, ...] = DEFAULT_ENCODINGS
    preview_limit: int = 150
    error_limit: int = 10
    history_size: int = 10

    def __post_init__(self) -> None:
        if self.history_path is None:
            self.history_path = _get_default_history_path()

    def resolve_history_path(self, base_dir: Path | None = None) -> Path:
        if self.history_path is None:
            self.history_path = _get_default_history_path()
        if Path(self.history_path).is_absolute() or base_dir is None:
            return Path(self.history_path)
        return base_dir / self.history_path
