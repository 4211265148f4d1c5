from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from lfsgate_core.config import apply_env_overrides, load_core_config, resolve_configured_paths
from lfsgate_core.db import resolve_db_path
from lfsgate_core.db.ids import sha256_hex_file
from lfsgate_core.db.locks import create_lock
from lfsgate_core.db.migrate import apply_migrations
from lfsgate_core.db.objects import ObjectRow, create_object, list_objects
from lfsgate_core.db.users import create_user
from lfsgate_core.home import ensure_lfsgate_layout, resolve_lfsgate_home
from lfsgate_core.storage.base import ContentStore
from lfsgate_core.storage.manager import build_content_store


def put_object_from_file(
    db_path: Path, content_store: ContentStore, *, file_path: Path
) -> ObjectRow:
    """Store a file's bytes under its SHA-256 oid, then record the metadata.

    Content goes in before metadata so a crash never leaves a record without bytes.
    """

    oid = sha256_hex_file(file_path)
    with file_path.open("rb") as f:
        size = content_store.put(oid, f)
    return create_object(db_path, oid=oid, size=size)


def find_missing_content(db_path: Path, content_store: ContentStore) -> list[str]:
    """Oids whose metadata exists but whose payload is gone (e.g. a half-finished delete)."""

    return [row.oid for row in list_objects(db_path) if not content_store.exists(row.oid)]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m lfsgate_core.internal.bootstrap_db",
        description="LFSGate Core metadata/content provisioning (no API).",
    )
    parser.add_argument("--home", type=Path, default=None, help="Override LFSGATE_HOME")
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply migrations (implied by every other action)",
    )
    parser.add_argument("--add-user", metavar="NAME", help="Create a user")
    parser.add_argument("--password", metavar="PASS", help="Password for --add-user")
    parser.add_argument(
        "--put-object",
        metavar="PATH",
        type=Path,
        help="Store a file as an object (content + metadata)",
    )
    parser.add_argument("--add-lock", metavar="PATH", help="Lock a repository path")
    parser.add_argument("--owner", metavar="NAME", help="Lock owner for --add-lock")
    parser.add_argument("--oid", metavar="OID", default=None, help="Object oid for --add-lock")
    parser.add_argument(
        "--check",
        action="store_true",
        help="List objects whose metadata exists but whose content is missing",
    )
    args = parser.parse_args(argv)

    if args.add_user and not args.password:
        parser.error("--add-user requires --password")
    if args.add_lock and not args.owner:
        parser.error("--add-lock requires --owner")

    environ = None
    if args.home is not None:
        environ = {"LFSGATE_HOME": str(args.home)}

    home = resolve_lfsgate_home(environ)
    paths = ensure_lfsgate_layout(home)
    config = apply_env_overrides(load_core_config(paths))
    paths = resolve_configured_paths(paths, config)

    db_path = resolve_db_path(paths)
    apply_migrations(db_path)

    content_store = build_content_store(paths=paths, config=config)

    if args.add_user:
        user = create_user(db_path, name=args.add_user, password=args.password)
        print(user.name)

    if args.put_object:
        row = put_object_from_file(db_path, content_store, file_path=args.put_object)
        print(json.dumps({"oid": row.oid, "size": row.size}, ensure_ascii=False))

    if args.add_lock:
        lock = create_lock(db_path, path=args.add_lock, owner_name=args.owner, oid=args.oid)
        print(lock.lock_id)

    if args.check:
        missing = find_missing_content(db_path, content_store)
        for oid in missing:
            print(oid)
        if missing:
            print(f"{len(missing)} object(s) missing content", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
