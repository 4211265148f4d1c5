from __future__ import annotations

from pathlib import Path

from lfsgate_core.config import CoreConfig
from lfsgate_core.home import LfsGatePaths
from lfsgate_core.storage.base import ContentStore
from lfsgate_core.storage.filesystem import FilesystemContentStore
from lfsgate_core.storage.s3 import S3ContentStore


def build_content_store(*, paths: LfsGatePaths, config: CoreConfig) -> ContentStore:
    provider = (config.storage.provider or "fs").strip().lower()

    if provider == "s3":
        cfg = config.storage.s3
        return S3ContentStore(
            endpoint_url=(cfg.endpoint_url or "").strip() or None,
            access_key=(cfg.access_key or "").strip() or None,
            secret_key=(cfg.secret_key or "").strip() or None,
            region=cfg.region,
            use_ssl=cfg.use_ssl,
            bucket=cfg.bucket,
        )

    if provider == "fs":
        store = FilesystemContentStore(Path(paths.content_dir))
        store.ensure_layout()
        return store

    raise ValueError(f"Unsupported storage provider: {provider}")
