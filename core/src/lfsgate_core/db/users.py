from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import bcrypt


def _connect(db_path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@dataclass(frozen=True)
class UserRow:
    name: str
    created_at: str


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def list_users(db_path) -> list[UserRow]:
    with _connect(db_path) as conn:
        rows = conn.execute("SELECT name, created_at FROM users ORDER BY name ASC;").fetchall()

    return [UserRow(name=r["name"], created_at=r["created_at"]) for r in rows]


def create_user(db_path, *, name: str, password: str) -> UserRow:
    """Insert a user. Raises sqlite3.IntegrityError if the name is taken."""

    with _connect(db_path) as conn:
        conn.execute(
            "INSERT INTO users (name, password_hash) VALUES (?, ?);",
            (name, hash_password(password)),
        )
        row = conn.execute(
            "SELECT name, created_at FROM users WHERE name = ?;",
            (name,),
        ).fetchone()

    if row is None:
        raise RuntimeError("Failed to read user after insert")

    return UserRow(name=row["name"], created_at=row["created_at"])


def delete_user(db_path, *, name: str) -> bool:
    with _connect(db_path) as conn:
        cur = conn.execute("DELETE FROM users WHERE name = ?;", (name,))
        return cur.rowcount > 0
