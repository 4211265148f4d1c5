from __future__ import annotations

from lfsgate_core.storage.base import ContentStore, ContentStoreError, object_key_for_oid
from lfsgate_core.storage.filesystem import FilesystemContentStore
from lfsgate_core.storage.manager import build_content_store
from lfsgate_core.storage.s3 import S3ContentStore

__all__ = [
    "ContentStore",
    "ContentStoreError",
    "FilesystemContentStore",
    "S3ContentStore",
    "build_content_store",
    "object_key_for_oid",
]
