from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from lfsgate_core.config import (
    MASKED,
    AdminConfig,
    CoreConfig,
    apply_env_overrides,
    config_snapshot,
    load_core_config,
    resolve_configured_paths,
)
from lfsgate_core.home import ensure_lfsgate_layout


def test_load_core_config_defaults_when_missing(tmp_path: Path) -> None:
    paths = ensure_lfsgate_layout(tmp_path)
    cfg = load_core_config(paths)
    assert isinstance(cfg, CoreConfig)
    assert cfg.network.bind_host == "127.0.0.1"
    assert cfg.storage.provider == "fs"
    assert cfg.admin.enabled is False


def test_load_core_config_validation_error(tmp_path: Path) -> None:
    paths = ensure_lfsgate_layout(tmp_path)

    paths.core_config_path.write_text(
        json.dumps({"network": {"core_port": "not-an-int"}}),
        encoding="utf-8",
    )

    with pytest.raises(ValidationError):
        load_core_config(paths)


def test_admin_config_is_frozen() -> None:
    admin = AdminConfig(user="admin", password="secret")
    assert admin.enabled is True

    with pytest.raises(ValidationError):
        admin.password = "other"


def test_admin_config_requires_both_values() -> None:
    assert AdminConfig(user="admin", password="").enabled is False
    assert AdminConfig(user="", password="secret").enabled is False


def test_apply_env_overrides_sets_admin_credentials() -> None:
    cfg = CoreConfig.model_validate({"admin": {"user": "fromfile", "password": "filepass"}})

    updated = apply_env_overrides(
        cfg, {"LFSGATE_ADMIN_USER": "admin", "LFSGATE_ADMIN_PASS": "secret"}
    )
    assert updated.admin.user == "admin"
    assert updated.admin.password == "secret"

    partial = apply_env_overrides(cfg, {"LFSGATE_ADMIN_PASS": "envpass"})
    assert partial.admin.user == "fromfile"
    assert partial.admin.password == "envpass"

    assert apply_env_overrides(cfg, {}) is cfg


def test_config_snapshot_masks_secrets() -> None:
    cfg = CoreConfig.model_validate(
        {
            "admin": {"user": "admin", "password": "secret"},
            "storage": {"s3": {"access_key": "ak", "secret_key": "sk"}},
        }
    )

    snapshot = config_snapshot(cfg)
    assert snapshot["admin"]["user"] == "admin"
    assert snapshot["admin"]["password"] == MASKED
    assert snapshot["storage"]["s3"]["access_key"] == "ak"
    assert snapshot["storage"]["s3"]["secret_key"] == MASKED

    # The config object itself is untouched.
    assert cfg.admin.password == "secret"


def test_resolve_configured_paths_creates_overrides(tmp_path: Path) -> None:
    paths = ensure_lfsgate_layout(tmp_path)

    cfg = CoreConfig.model_validate(
        {
            "paths": {
                "db_dir": "custom_db",
                "content_dir": "custom_content",
            }
        }
    )

    resolved = resolve_configured_paths(paths, cfg)
    assert resolved.db_dir.is_dir()
    assert resolved.content_dir.is_dir()

    # Overrides are resolved relative to LFSGATE_HOME by default.
    assert resolved.db_dir == (tmp_path / "custom_db").resolve()
    assert resolved.content_dir == (tmp_path / "custom_content").resolve()

    # Non-configurable dirs remain under home.
    assert resolved.config_dir == tmp_path / "config"
