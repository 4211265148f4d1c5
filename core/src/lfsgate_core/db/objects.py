from __future__ import annotations

import sqlite3
from dataclasses import dataclass


def _connect(db_path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@dataclass(frozen=True)
class ObjectRow:
    oid: str
    size: int
    created_at: str


def _object_from_db_row(row: sqlite3.Row) -> ObjectRow:
    return ObjectRow(
        oid=row["oid"],
        size=int(row["size"]),
        created_at=row["created_at"],
    )


def get_object(db_path, *, oid: str) -> ObjectRow | None:
    with _connect(db_path) as conn:
        row = conn.execute(
            "SELECT oid, size, created_at FROM objects WHERE oid = ?;",
            (oid,),
        ).fetchone()

    return _object_from_db_row(row) if row is not None else None


def list_objects(db_path) -> list[ObjectRow]:
    with _connect(db_path) as conn:
        rows = conn.execute(
            "SELECT oid, size, created_at FROM objects ORDER BY created_at DESC, oid ASC;"
        ).fetchall()

    return [_object_from_db_row(r) for r in rows]


def create_object(db_path, *, oid: str, size: int) -> ObjectRow:
    """Insert object metadata; re-inserting an existing oid keeps the original row."""

    with _connect(db_path) as conn:
        conn.execute(
            "INSERT INTO objects (oid, size) VALUES (?, ?) ON CONFLICT(oid) DO NOTHING;",
            (oid, size),
        )
        row = conn.execute(
            "SELECT oid, size, created_at FROM objects WHERE oid = ?;",
            (oid,),
        ).fetchone()

    if row is None:
        raise RuntimeError("Failed to read object after insert")

    return _object_from_db_row(row)


def delete_object(db_path, *, oid: str) -> bool:
    """Delete-if-exists. Returns whether a row was removed."""

    with _connect(db_path) as conn:
        cur = conn.execute("DELETE FROM objects WHERE oid = ?;", (oid,))
        return cur.rowcount > 0
