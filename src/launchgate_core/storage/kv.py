from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

from launchgate_core.db.kv import apply_kv_changes, delete_kv_value, get_kv_value, set_kv_value


class KeyValueStore(Protocol):
    """Scalar key/value persistence.

    Reads of missing keys return None. Writes are visible to the next read
    in the same process. `apply` groups several changes so that they all
    land or none do.
    """

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def apply(
        self,
        *,
        set_values: Mapping[str, Any] | None = None,
        delete_keys: Iterable[str] = (),
    ) -> None: ...


class SqliteKeyValueStore:
    """Durable store backed by the `kv_entries` table.

    Values are stored JSON-encoded so booleans and strings keep their type.
    The table must already exist (see `db.schema.ensure_kv_schema`).
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    def get(self, key: str) -> Any | None:
        return get_kv_value(self._db_path, key=key)

    def set(self, key: str, value: Any) -> None:
        set_kv_value(self._db_path, key=key, value=value)

    def delete(self, key: str) -> None:
        delete_kv_value(self._db_path, key=key)

    def apply(
        self,
        *,
        set_values: Mapping[str, Any] | None = None,
        delete_keys: Iterable[str] = (),
    ) -> None:
        apply_kv_changes(self._db_path, set_values=set_values, delete_keys=delete_keys)


class InMemoryKeyValueStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def apply(
        self,
        *,
        set_values: Mapping[str, Any] | None = None,
        delete_keys: Iterable[str] = (),
    ) -> None:
        with self._lock:
            updated = dict(self._values)
            for key in delete_keys:
                updated.pop(key, None)
            for key, value in (set_values or {}).items():
                updated[key] = value
            self._values = updated

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._values)
