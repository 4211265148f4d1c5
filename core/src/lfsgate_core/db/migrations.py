from __future__ import annotations

MIGRATIONS: list[tuple[str, str]] = [
    (
        "0001_init",
        """
CREATE TABLE IF NOT EXISTS objects (
    oid TEXT PRIMARY KEY,
    size INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE TABLE IF NOT EXISTS users (
    name TEXT PRIMARY KEY,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE TABLE IF NOT EXISTS locks (
    lock_id TEXT PRIMARY KEY,
    path TEXT NOT NULL,
    owner_name TEXT NOT NULL,
    oid TEXT,
    locked_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    UNIQUE(path)
);

CREATE INDEX IF NOT EXISTS idx_locks_oid ON locks(oid);
""",
    )
]
