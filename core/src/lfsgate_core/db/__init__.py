from __future__ import annotations

from pathlib import Path

from lfsgate_core.home import LfsGatePaths

DEFAULT_DB_FILENAME = "meta.sqlite3"


def resolve_db_path(paths: LfsGatePaths) -> Path:
    """Resolve the metadata SQLite database path (objects, users, locks)."""

    return paths.db_dir / DEFAULT_DB_FILENAME
