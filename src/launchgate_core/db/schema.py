from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

logger = logging.getLogger(__name__)

# Bumped whenever KV_SCHEMA changes shape; stored in SQLite's `user_version`.
SCHEMA_VERSION = 1

KV_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_entries (
    key TEXT PRIMARY KEY,
    value_json TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""


def read_schema_version(db_path: Path) -> int:
    if not db_path.exists():
        return 0
    with closing(sqlite3.connect(db_path)) as conn:
        return int(conn.execute("PRAGMA user_version;").fetchone()[0])


def ensure_kv_schema(db_path: Path) -> None:
    """Create the decision database and its `kv_entries` table if needed.

    Runs on every startup. A database already at SCHEMA_VERSION is left
    alone; one written by a newer build is refused rather than guessed at.
    """

    db_path.parent.mkdir(parents=True, exist_ok=True)

    with closing(sqlite3.connect(db_path)) as conn, conn:
        version = int(conn.execute("PRAGMA user_version;").fetchone()[0])
        if version > SCHEMA_VERSION:
            raise RuntimeError(
                f"{db_path} has schema version {version}; "
                f"this build understands up to {SCHEMA_VERSION}"
            )
        if version == SCHEMA_VERSION:
            return

        logger.info("Initializing decision database %s (schema %s)", db_path, SCHEMA_VERSION)
        conn.execute(KV_SCHEMA.strip())
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
