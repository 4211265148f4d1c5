from __future__ import annotations

import sqlite3
from pathlib import Path

from lfsgate_core.db import locks as locks_db
from lfsgate_core.db import objects as objects_db
from lfsgate_core.db import users as users_db
from lfsgate_core.db.locks import LockRow
from lfsgate_core.db.objects import ObjectRow
from lfsgate_core.db.users import UserRow


class MetaStoreError(Exception):
    """A metadata store operation failed."""


class ObjectNotFoundError(MetaStoreError):
    def __init__(self, oid: str) -> None:
        super().__init__(f"object not found: {oid}")
        self.oid = oid


class MetaStore:
    """Management-side view of the metadata DB.

    ``get_object_unsafe`` skips the per-request authorization the LFS protocol
    applies to object lookups. Only the gated /mgmt handlers hold a MetaStore.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    @property
    def db_path(self) -> Path:
        return self._db_path

    def list_objects(self) -> list[ObjectRow]:
        try:
            return objects_db.list_objects(self._db_path)
        except sqlite3.Error as e:
            raise MetaStoreError(str(e)) from e

    def get_object_unsafe(self, oid: str) -> ObjectRow:
        try:
            row = objects_db.get_object(self._db_path, oid=oid)
        except sqlite3.Error as e:
            raise MetaStoreError(str(e)) from e
        if row is None:
            raise ObjectNotFoundError(oid)
        return row

    def delete_object(self, oid: str) -> None:
        try:
            objects_db.delete_object(self._db_path, oid=oid)
        except sqlite3.Error as e:
            raise MetaStoreError(str(e)) from e

    def list_locks(self) -> list[LockRow]:
        try:
            return locks_db.list_locks(self._db_path)
        except sqlite3.Error as e:
            raise MetaStoreError(str(e)) from e

    def list_users(self) -> list[UserRow]:
        try:
            return users_db.list_users(self._db_path)
        except sqlite3.Error as e:
            raise MetaStoreError(str(e)) from e

    def add_user(self, name: str, password: str) -> None:
        try:
            users_db.create_user(self._db_path, name=name, password=password)
        except sqlite3.IntegrityError as e:
            raise MetaStoreError(f"user already exists: {name}") from e
        except ValueError as e:
            # bcrypt refuses passwords longer than 72 bytes.
            raise MetaStoreError(f"invalid password: {e}") from e
        except sqlite3.Error as e:
            raise MetaStoreError(str(e)) from e

    def delete_user(self, name: str) -> None:
        try:
            users_db.delete_user(self._db_path, name=name)
        except sqlite3.Error as e:
            raise MetaStoreError(str(e)) from e
