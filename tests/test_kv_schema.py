from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path

import pytest

from launchgate_core.config import load_core_config, resolve_configured_paths
from launchgate_core.db import resolve_db_path
from launchgate_core.db.schema import SCHEMA_VERSION, ensure_kv_schema, read_schema_version
from launchgate_core.home import ensure_launchgate_layout
from launchgate_core.storage.kv import SqliteKeyValueStore


def _table_names(db_path: Path) -> set[str]:
    with closing(sqlite3.connect(db_path)) as conn:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name ASC;"
        ).fetchall()
    return {r[0] for r in rows}


def _table_columns(db_path: Path, table: str) -> set[str]:
    with closing(sqlite3.connect(db_path)) as conn:
        rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    return {r[1] for r in rows}


def test_schema_blank_to_current(tmp_path: Path) -> None:
    paths = ensure_launchgate_layout(tmp_path)
    config = load_core_config(paths)
    paths = resolve_configured_paths(paths, config)

    db_path = resolve_db_path(paths)
    assert read_schema_version(db_path) == 0

    ensure_kv_schema(db_path)
    ensure_kv_schema(db_path)  # idempotent

    assert _table_names(db_path) == {"kv_entries"}
    assert _table_columns(db_path, "kv_entries") == {"key", "value_json", "updated_at"}
    assert read_schema_version(db_path) == SCHEMA_VERSION


def test_schema_creates_missing_parent_dir(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "db" / "launchgate.sqlite3"

    ensure_kv_schema(db_path)

    assert db_path.is_file()


def test_rerun_keeps_existing_entries(tmp_path: Path) -> None:
    db_path = tmp_path / "launchgate.sqlite3"
    ensure_kv_schema(db_path)
    SqliteKeyValueStore(db_path).set("registration_attempted", True)

    ensure_kv_schema(db_path)

    assert SqliteKeyValueStore(db_path).get("registration_attempted") is True


def test_newer_schema_is_refused(tmp_path: Path) -> None:
    db_path = tmp_path / "launchgate.sqlite3"
    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1};")

    with pytest.raises(RuntimeError, match="schema version"):
        ensure_kv_schema(db_path)
