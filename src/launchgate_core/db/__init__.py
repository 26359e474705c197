from __future__ import annotations

from pathlib import Path

from launchgate_core.home import LaunchGatePaths

DEFAULT_DB_FILENAME = "launchgate.sqlite3"


def resolve_db_path(paths: LaunchGatePaths) -> Path:
    """Resolve the SQLite database holding the persisted decision.

    The directory follows the `db_dir` layout/override.
    """

    return paths.db_dir / DEFAULT_DB_FILENAME
