"""SQLite-backed key/value storage for cached discovery results."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class SqliteStore:
    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")

    def init_db(self) -> None:
        """Create all tables and indexes."""
        cur = self._conn.cursor()
        cur.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        self._conn.commit()

    # ── Key/value ──

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value (INSERT OR REPLACE)."""
        now = datetime.now(timezone.utc).isoformat()
        self._conn.execute(
            "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
            (key, json.dumps(value), now),
        )
        self._conn.commit()

    def get(self, key: str) -> Any | None:
        """Get a value by key, or None if not found."""
        cur = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cur.fetchone()
        return json.loads(row[0]) if row else None

    def delete(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._conn.commit()

    def keys(self) -> list[str]:
        cur = self._conn.execute("SELECT key FROM kv ORDER BY key")
        return [row[0] for row in cur.fetchall()]

    # ── Counts ──

    def count(self) -> int:
        return self._conn.execute("SELECT count(*) FROM kv").fetchone()[0]

    def close(self) -> None:
        self._conn.close()
