from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable, Iterator, Mapping
from contextlib import closing, contextmanager
from datetime import UTC, datetime
from typing import Any

_UPSERT_SQL = """
INSERT INTO kv_entries (key, value_json, updated_at)
VALUES (?, ?, ?)
ON CONFLICT(key) DO UPDATE SET
    value_json = excluded.value_json,
    updated_at = excluded.updated_at;
""".strip()

_DELETE_SQL = "DELETE FROM kv_entries WHERE key = ?;"


def _utc_now_sqlite_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@contextmanager
def _transaction(db_path) -> Iterator[sqlite3.Connection]:
    """One connection, one transaction: committed on success, rolled back on error."""

    with closing(sqlite3.connect(db_path)) as conn, conn:
        conn.row_factory = sqlite3.Row
        yield conn


def get_kv_value(db_path, *, key: str) -> Any | None:
    with _transaction(db_path) as conn:
        row = conn.execute(
            """
            SELECT value_json
            FROM kv_entries
            WHERE key = ?;
            """.strip(),
            (key,),
        ).fetchone()

    if row is None:
        return None
    return json.loads(row["value_json"])


def set_kv_value(db_path, *, key: str, value: Any) -> None:
    apply_kv_changes(db_path, set_values={key: value})


def delete_kv_value(db_path, *, key: str) -> bool:
    with _transaction(db_path) as conn:
        cur = conn.execute(_DELETE_SQL, (key,))
        return cur.rowcount > 0


def apply_kv_changes(
    db_path,
    *,
    set_values: Mapping[str, Any] | None = None,
    delete_keys: Iterable[str] = (),
) -> None:
    """Delete then upsert several keys in a single transaction.

    Either every change lands or none does.
    """

    now = _utc_now_sqlite_iso()
    with _transaction(db_path) as conn:
        for key in delete_keys:
            conn.execute(_DELETE_SQL, (key,))
        for key, value in (set_values or {}).items():
            conn.execute(_UPSERT_SQL, (key, json.dumps(value, ensure_ascii=False), now))
