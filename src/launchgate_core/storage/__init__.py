from __future__ import annotations

from launchgate_core.storage.kv import InMemoryKeyValueStore, KeyValueStore, SqliteKeyValueStore

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqliteKeyValueStore",
]
