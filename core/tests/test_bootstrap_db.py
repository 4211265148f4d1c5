from __future__ import annotations

import json
from pathlib import Path

from lfsgate_core.db import resolve_db_path
from lfsgate_core.db.ids import sha256_hex
from lfsgate_core.home import ensure_lfsgate_layout
from lfsgate_core.internal.bootstrap_db import main
from lfsgate_core.metastore import MetaStore
from lfsgate_core.storage import FilesystemContentStore


def test_bootstrap_provisions_user_object_and_lock(tmp_path: Path, capsys) -> None:
    home = tmp_path / "home"
    payload = tmp_path / "payload.bin"
    payload.write_bytes(b"provisioned bytes")

    assert main(["--home", str(home), "--add-user", "frank", "--password", "pw"]) == 0
    assert main(["--home", str(home), "--put-object", str(payload)]) == 0
    out = capsys.readouterr().out.strip().splitlines()
    obj = json.loads(out[-1])
    assert obj == {"oid": sha256_hex(b"provisioned bytes"), "size": len(b"provisioned bytes")}

    assert main(["--home", str(home), "--add-lock", "data/x.bin", "--owner", "frank"]) == 0

    paths = ensure_lfsgate_layout(home.resolve())
    store = MetaStore(resolve_db_path(paths))
    assert [u.name for u in store.list_users()] == ["frank"]
    assert store.get_object_unsafe(obj["oid"]).size == obj["size"]
    assert [lock.path for lock in store.list_locks()] == ["data/x.bin"]

    content = FilesystemContentStore(paths.content_dir)
    assert content.exists(obj["oid"])


def test_bootstrap_check_reports_missing_content(tmp_path: Path, capsys) -> None:
    home = tmp_path / "home"
    payload = tmp_path / "payload.bin"
    payload.write_bytes(b"soon orphaned")

    assert main(["--home", str(home), "--put-object", str(payload)]) == 0
    assert main(["--home", str(home), "--check"]) == 0
    capsys.readouterr()

    oid = sha256_hex(b"soon orphaned")
    paths = ensure_lfsgate_layout(home.resolve())
    FilesystemContentStore(paths.content_dir).delete_file(oid)

    assert main(["--home", str(home), "--check"]) == 1
    assert capsys.readouterr().out.strip() == oid
