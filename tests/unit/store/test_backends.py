"""Tests for the session state backends and their migrations."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from chatrelay.store.backends import (
    MIGRATIONS,
    MemoryBackend,
    SqliteBackend,
    open_backend,
    run_migrations,
)


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


@pytest.fixture(params=["memory", "sqlite"])
def any_backend(request, tmp_path: Path):
    if request.param == "memory":
        yield MemoryBackend()
    else:
        with SqliteBackend(tmp_path / "state.db") as backend:
            yield backend


def test_read_missing_key_is_none(any_backend) -> None:
    assert any_backend.read("sources") is None
    assert any_backend.read_json("sources") is None


def test_write_then_read(any_backend) -> None:
    any_backend.write("k", "v1")
    any_backend.write("k", "v2")
    assert any_backend.read("k") == "v2"


def test_json_round_trip_keeps_unicode(any_backend) -> None:
    any_backend.write_json("userMemory", {"facts": ["lives in Zürich"]})
    assert any_backend.read_json("userMemory") == {"facts": ["lives in Zürich"]}


def test_delete_missing_key_is_ignored(any_backend) -> None:
    any_backend.delete("nope")
    any_backend.write("k", "v")
    any_backend.delete("k")
    assert any_backend.read("k") is None


def test_read_json_corrupt_raises_value_error(any_backend) -> None:
    any_backend.write("sources", "{not json")
    with pytest.raises(ValueError):
        any_backend.read_json("sources")


# ---------------------------------------------------------------------------
# SQLite specifics
# ---------------------------------------------------------------------------


def test_sqlite_state_survives_reopen(tmp_path: Path) -> None:
    path = tmp_path / "state.db"
    with SqliteBackend(path) as backend:
        backend.write_json("sources", [{"id": "a"}])

    with SqliteBackend(path) as backend:
        assert backend.read_json("sources") == [{"id": "a"}]


def test_migrations_idempotent(tmp_path: Path) -> None:
    conn = sqlite3.connect(tmp_path / "state.db")
    run_migrations(conn)
    run_migrations(conn)

    versions = [r[0] for r in conn.execute("SELECT version FROM schema_version")]
    assert versions == [v for v, _ in MIGRATIONS]
    tables = {
        r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    assert "session_state" in tables
    conn.close()


def test_open_backend_none_is_memory() -> None:
    assert isinstance(open_backend(None), MemoryBackend)


def test_open_backend_path_is_sqlite(tmp_path: Path) -> None:
    backend = open_backend(str(tmp_path / "state.db"))
    try:
        assert isinstance(backend, SqliteBackend)
    finally:
        backend.close()
