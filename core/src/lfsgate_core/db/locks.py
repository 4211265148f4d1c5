from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from lfsgate_core.db.ids import new_lock_id


def _connect(db_path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@dataclass(frozen=True)
class LockRow:
    lock_id: str
    path: str
    owner_name: str
    oid: str | None
    locked_at: str


def _lock_from_db_row(row: sqlite3.Row) -> LockRow:
    return LockRow(
        lock_id=row["lock_id"],
        path=row["path"],
        owner_name=row["owner_name"],
        oid=row["oid"],
        locked_at=row["locked_at"],
    )


def list_locks(db_path) -> list[LockRow]:
    with _connect(db_path) as conn:
        rows = conn.execute(
            """
            SELECT lock_id, path, owner_name, oid, locked_at
            FROM locks
            ORDER BY locked_at DESC, path ASC;
            """.strip()
        ).fetchall()

    return [_lock_from_db_row(r) for r in rows]


def create_lock(db_path, *, path: str, owner_name: str, oid: str | None = None) -> LockRow:
    """Record a lock on ``path``. Raises sqlite3.IntegrityError if it is already locked."""

    lock_id = new_lock_id()

    with _connect(db_path) as conn:
        conn.execute(
            "INSERT INTO locks (lock_id, path, owner_name, oid) VALUES (?, ?, ?, ?);",
            (lock_id, path, owner_name, oid),
        )
        row = conn.execute(
            """
            SELECT lock_id, path, owner_name, oid, locked_at
            FROM locks
            WHERE lock_id = ?;
            """.strip(),
            (lock_id,),
        ).fetchone()

    if row is None:
        raise RuntimeError("Failed to read lock after insert")

    return _lock_from_db_row(row)
