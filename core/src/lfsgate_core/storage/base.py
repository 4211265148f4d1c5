from __future__ import annotations

from typing import BinaryIO, Protocol

from lfsgate_core.db.ids import is_valid_oid
from lfsgate_core.db.objects import ObjectRow


class ContentStoreError(Exception):
    """A content store operation failed."""


class ContentStore(Protocol):
    provider_name: str

    def get(self, meta: ObjectRow, offset: int = 0) -> BinaryIO: ...

    def put(self, oid: str, stream: BinaryIO) -> int: ...

    def exists(self, oid: str) -> bool: ...

    def delete_file(self, oid: str) -> None: ...


def object_key_for_oid(oid: str) -> str:
    """Sharded key ``objects/<aa>/<bb>/<oid>`` shared by every provider."""

    if not is_valid_oid(oid):
        raise ContentStoreError(f"invalid oid: {oid!r}")
    return f"objects/{oid[0:2]}/{oid[2:4]}/{oid}"
