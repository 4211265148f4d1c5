from __future__ import annotations

import io
from pathlib import Path

import pytest

from lfsgate_core.db.ids import sha256_hex
from lfsgate_core.db.objects import ObjectRow
from lfsgate_core.storage import ContentStoreError, FilesystemContentStore, object_key_for_oid


def _meta(data: bytes) -> ObjectRow:
    return ObjectRow(oid=sha256_hex(data), size=len(data), created_at="")


def test_object_key_is_sharded() -> None:
    oid = sha256_hex(b"hello")
    assert object_key_for_oid(oid) == f"objects/{oid[:2]}/{oid[2:4]}/{oid}"


def test_object_key_rejects_invalid_oid() -> None:
    with pytest.raises(ContentStoreError):
        object_key_for_oid("../../etc/passwd")


def test_put_get_and_offset(tmp_path: Path) -> None:
    store = FilesystemContentStore(tmp_path)
    store.ensure_layout()

    data = b"hello world"
    meta = _meta(data)

    assert store.put(meta.oid, io.BytesIO(data)) == len(data)
    assert store.exists(meta.oid)
    assert store.resolve_path(meta.oid) == (tmp_path / object_key_for_oid(meta.oid)).resolve()

    with store.get(meta) as f:
        assert f.read() == data
    with store.get(meta, 6) as f:
        assert f.read() == b"world"

    # No temp files left behind next to the payload.
    assert list(store.resolve_path(meta.oid).parent.iterdir()) == [store.resolve_path(meta.oid)]


def test_get_missing_raises(tmp_path: Path) -> None:
    store = FilesystemContentStore(tmp_path)

    with pytest.raises(ContentStoreError):
        store.get(_meta(b"nothing here"))


def test_delete_file_is_idempotent(tmp_path: Path) -> None:
    store = FilesystemContentStore(tmp_path)
    data = b"bytes"
    meta = _meta(data)
    store.put(meta.oid, io.BytesIO(data))

    store.delete_file(meta.oid)
    store.delete_file(meta.oid)

    assert not store.exists(meta.oid)
