from __future__ import annotations

import hashlib
import uuid
from pathlib import Path
from typing import BinaryIO

_HEX = frozenset("0123456789abcdef")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_hex_stream(stream: BinaryIO, *, chunk_size: int = 1024 * 1024) -> str:
    """Compute a SHA-256 hex digest from a binary stream."""

    h = hashlib.sha256()
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        h.update(chunk)
    return h.hexdigest()


def sha256_hex_file(path: Path, *, chunk_size: int = 1024 * 1024) -> str:
    with path.open("rb") as f:
        return sha256_hex_stream(f, chunk_size=chunk_size)


def is_valid_oid(oid: str) -> bool:
    """LFS oids are lowercase SHA-256 hex digests (64 chars)."""

    return len(oid) == 64 and all(c in _HEX for c in oid)


def new_lock_id() -> str:
    return uuid.uuid4().hex
