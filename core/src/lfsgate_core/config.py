from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lfsgate_core.home import LfsGatePaths

ADMIN_USER_ENV = "LFSGATE_ADMIN_USER"
ADMIN_PASS_ENV = "LFSGATE_ADMIN_PASS"

MASKED = "********"


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    core_port: int = Field(default=8080, ge=1, le=65535)


class AdminConfig(BaseModel):
    """Administrator credentials for the /mgmt surface.

    Leaving either value empty disables the management surface entirely
    (every /mgmt route answers 404).
    """

    model_config = ConfigDict(frozen=True)

    user: str = Field(default="")
    password: str = Field(default="")

    @property
    def enabled(self) -> bool:
        return bool(self.user) and bool(self.password)


class S3StorageConfig(BaseModel):
    """S3-compatible content storage settings."""

    endpoint_url: str | None = Field(
        default=None,
        description=(
            "S3 endpoint URL, e.g. http://127.0.0.1:9000. If omitted, boto3 defaults apply."
        ),
    )
    access_key: str | None = Field(default=None)
    secret_key: str | None = Field(default=None)
    bucket: str = Field(default="lfsgate")
    region: str = Field(default="us-east-1")
    use_ssl: bool = Field(default=False)


class StorageConfig(BaseModel):
    provider: str = Field(default="fs", description="'fs' or 's3'")
    s3: S3StorageConfig = Field(default_factory=S3StorageConfig)


class PathOverrides(BaseModel):
    db_dir: str | None = None
    content_dir: str | None = None
    logs_dir: str | None = None


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class CoreConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    paths: PathOverrides = Field(default_factory=PathOverrides)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_core_config(paths: LfsGatePaths) -> CoreConfig:
    """Load config from ${LFSGATE_HOME}/config/core.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.core_config_path
    if not config_path.exists():
        return CoreConfig()

    raw = _read_json(config_path)
    return CoreConfig.model_validate(raw)


def apply_env_overrides(
    config: CoreConfig, environ: dict[str, str] | None = None
) -> CoreConfig:
    """Let the environment supply admin credentials.

    Operators usually keep the admin password out of core.json.
    """

    env = os.environ if environ is None else environ

    user = env.get(ADMIN_USER_ENV)
    password = env.get(ADMIN_PASS_ENV)
    if user is None and password is None:
        return config

    admin = AdminConfig(
        user=user if user is not None else config.admin.user,
        password=password if password is not None else config.admin.password,
    )
    return config.model_copy(update={"admin": admin})


def config_snapshot(config: CoreConfig) -> dict[str, Any]:
    """Config as shown on the management index page, with secrets masked."""

    snapshot = config.model_dump(mode="json")
    if snapshot["admin"].get("password"):
        snapshot["admin"]["password"] = MASKED
    if snapshot["storage"]["s3"].get("secret_key"):
        snapshot["storage"]["s3"]["secret_key"] = MASKED
    return snapshot


def resolve_configured_paths(paths: LfsGatePaths, config: CoreConfig) -> LfsGatePaths:
    """Apply user-configurable path overrides from config.

    config/ is not configurable.
    """

    def _resolve_dir(raw: str | None, default: Path) -> Path:
        if raw is None or not str(raw).strip():
            return default
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = (paths.home / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    db_dir = _resolve_dir(config.paths.db_dir, paths.db_dir)
    content_dir = _resolve_dir(config.paths.content_dir, paths.content_dir)
    logs_dir = _resolve_dir(config.paths.logs_dir, paths.logs_dir)

    for p in (db_dir, content_dir, logs_dir):
        p.mkdir(parents=True, exist_ok=True)

    return LfsGatePaths(
        home=paths.home,
        db_dir=db_dir,
        content_dir=content_dir,
        logs_dir=logs_dir,
        config_dir=paths.config_dir,
    )
