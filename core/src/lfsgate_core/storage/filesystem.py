from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from lfsgate_core.db.objects import ObjectRow
from lfsgate_core.storage.base import ContentStoreError, object_key_for_oid


class FilesystemContentStore:
    """Local filesystem object payload storage.

    Layout is content-addressed by the LFS oid (SHA-256 hex).

    Base dir: ${LFSGATE_HOME}/content
    File path: objects/<aa>/<bb>/<oid>
    """

    provider_name = "fs"

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = base_dir

    def ensure_layout(self) -> None:
        (self._base_dir / "objects").mkdir(parents=True, exist_ok=True)

    def resolve_path(self, oid: str) -> Path:
        return (self._base_dir / object_key_for_oid(oid)).resolve()

    def exists(self, oid: str) -> bool:
        return self.resolve_path(oid).exists()

    def get(self, meta: ObjectRow, offset: int = 0) -> BinaryIO:
        path = self.resolve_path(meta.oid)
        try:
            f = path.open("rb")
        except OSError as e:
            raise ContentStoreError(f"content not found: {meta.oid}") from e

        if offset:
            try:
                f.seek(offset)
            except OSError as e:
                f.close()
                raise ContentStoreError(f"cannot seek to {offset}: {meta.oid}") from e
        return f

    def put(self, oid: str, stream: BinaryIO) -> int:
        """Write the payload for ``oid``. Returns the number of bytes stored.

        Bytes land in a temp file beside the destination first, then get moved
        into place, so readers never see a partial object.
        """

        dst = self.resolve_path(oid)
        dst.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{oid}.", dir=dst.parent)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as out:
                shutil.copyfileobj(stream, out, length=1024 * 1024)
            tmp_path.replace(dst)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise ContentStoreError(f"failed to store {oid}: {e}") from e

        try:
            os.chmod(dst, 0o644)
        except OSError:
            pass

        return dst.stat().st_size

    def delete_file(self, oid: str) -> None:
        """Delete-if-exists; a missing payload is not an error."""

        path = self.resolve_path(oid)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise ContentStoreError(f"failed to delete {oid}: {e}") from e
