"""Tests for Database connection layer."""

from __future__ import annotations

from pathlib import Path

import pytest

from docinsight.db.connection import Database, open_database
from docinsight.db.schema import CURRENT_VERSION, schema_version


def test_connect_creates_file(tmp_path):
    db_path = tmp_path / ".docinsight.db"
    db = Database(db_path)
    conn = db.connect()
    conn.close()
    assert db_path.exists()


def test_sqlite_vec_loads(tmp_path):
    db = Database(tmp_path / ".docinsight.db")
    conn = db.connect()
    version = conn.execute("SELECT vec_version()").fetchone()[0]
    conn.close()
    assert version.startswith("v")


def test_foreign_keys_enabled(tmp_path):
    db = Database(tmp_path / ".docinsight.db")
    conn = db.connect()
    result = conn.execute("PRAGMA foreign_keys").fetchone()[0]
    conn.close()
    assert result == 1


def test_wal_journal_mode(tmp_path):
    db = Database(tmp_path / ".docinsight.db")
    conn = db.connect()
    mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
    conn.close()
    assert mode == "wal"


def test_row_factory_set(tmp_path):
    db = Database(tmp_path / ".docinsight.db")
    conn = db.connect()
    conn.execute("CREATE TABLE t (x INTEGER)")
    conn.execute("INSERT INTO t VALUES (42)")
    row = conn.execute("SELECT x FROM t").fetchone()
    conn.close()
    assert row["x"] == 42


def test_context_manager_closes_connection(tmp_path):
    db = Database(tmp_path / ".docinsight.db")
    with db as conn:
        conn.execute("CREATE TABLE t (x INTEGER)")
    with pytest.raises(Exception):
        conn.execute("SELECT 1")


def test_context_manager_accepts_path_str(tmp_path):
    db = Database(str(tmp_path / ".docinsight.db"))
    assert isinstance(db.db_path, Path)
    with db as conn:
        result = conn.execute("SELECT 1").fetchone()[0]
    assert result == 1


# --- open_database ---

def test_open_database_initializes_schema(tmp_path):
    conn = open_database(tmp_path / "fresh.db")
    try:
        assert schema_version(conn) == CURRENT_VERSION
    finally:
        conn.close()


def test_open_database_reopen_keeps_data(tmp_path):
    path = tmp_path / "keep.db"
    conn = open_database(path)
    conn.execute(
        "INSERT INTO documents (owner_id, filename, content_type, storage_path, size_bytes, created_at)"
        " VALUES (1, 'a.txt', 'text/plain', 'x_a.txt', 3, '2026-01-01T00:00:00.000000+00:00')"
    )
    conn.commit()
    conn.close()

    conn = open_database(path)
    try:
        assert conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0] == 1
    finally:
        conn.close()
