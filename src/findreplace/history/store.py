"""SQLite-backed history of recent find and replace inputs."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

FIND = "find"
REPLACE = "replace"


class SQLiteHistoryStore:
    """Keeps the most recent search and replacement strings across runs."""

    def __init__(self, db_path: Path, *, max_items: int = 10) -> None:
        self.db_path = Path(db_path)
        self.max_items = max_items
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "SQLiteHistoryStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    kind TEXT NOT NULL,
                    value TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(kind, value)
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS history_kind ON history(kind, id)")

    def _load(self, kind: str) -> List[str]:
        rows = self._conn.execute(
            "SELECT value FROM history WHERE kind = ? ORDER BY id DESC LIMIT ?",
            (kind, self.max_items),
        ).fetchall()
        return [row["value"] for row in rows]

    def load_finds(self) -> List[str]:
        return self._load(FIND)

    def load_replaces(self) -> List[str]:
        return self._load(REPLACE)

    def _insert_most_recent(self, conn: sqlite3.Connection, kind: str, value: str) -> None:
        value = value.strip()
        if not value:
            return
        conn.execute("DELETE FROM history WHERE kind = ? AND value = ?", (kind, value))
        conn.execute("INSERT INTO history (kind, value) VALUES (?, ?)", (kind, value))
        conn.execute(
            """
            DELETE FROM history
            WHERE kind = ? AND id NOT IN (
                SELECT id FROM history WHERE kind = ? ORDER BY id DESC LIMIT ?
            )
            """,
            (kind, kind, self.max_items),
        )

    def save(self, find: str, replace: str) -> None:
        """Move both values to the front of their lists, trimming to max_items."""
        with self.transaction() as conn:
            self._insert_most_recent(conn, FIND, find)
            self._insert_most_recent(conn, REPLACE, replace)

    def clear(self) -> None:
        with self.transaction() as conn:
            conn.execute("DELETE FROM history")
