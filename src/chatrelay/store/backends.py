"""Pluggable persistence for session state.

Stores serialise their state to JSON and hand it to a backend under a fixed
key (``sources``, ``conversations``, ``chat_<id>``, ``userMemory``). Two
backends are provided:

  MemoryBackend  — a dict; state lives as long as the process.
  SqliteBackend  — one key/value table in a SQLite file.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class StateBackend(ABC):
    """Key/value text storage used by the session stores."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the raw value stored under *key*, or None."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*. Missing keys are ignored."""

    def read_json(self, key: str) -> Any:
        """Return the decoded JSON under *key*, or None if absent.

        Raises:
            ValueError: If the stored value is not valid JSON.
        """
        raw = self.read(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write_json(self, key: str, value: Any) -> None:
        self.write(key, json.dumps(value, ensure_ascii=False))

    def close(self) -> None:
        """Release resources held by the backend."""


class MemoryBackend(StateBackend):
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS session_state (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);
"""

# Append-only. Each entry: (version: int, sql: str).
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order (idempotent)."""
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    current = row[0] if row[0] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
            conn.commit()


class SqliteBackend(StateBackend):
    """Session state in a single SQLite file.

    The connection is shared across the server's worker threads; a lock
    serialises access.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode = WAL")
        run_migrations(self._conn)

    def read(self, key: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM session_state WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def write(self, key: str, value: str) -> None:
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO session_state (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = datetime('now')
                """,
                (key, value),
            )
            self._conn.commit()

    def delete(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM session_state WHERE key = ?", (key,))
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> SqliteBackend:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def open_backend(path: str | None) -> StateBackend:
    """Return a SqliteBackend for *path*, or a MemoryBackend when *path* is None."""
    if not path:
        return MemoryBackend()
    return SqliteBackend(path)
