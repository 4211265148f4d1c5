from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LfsGatePaths:
    home: Path
    db_dir: Path
    content_dir: Path
    logs_dir: Path
    config_dir: Path

    @property
    def core_config_path(self) -> Path:
        return self.config_dir / "core.json"


def resolve_lfsgate_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("LFSGATE_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        # Never interpret LFSGATE_HOME relative to CWD (service managers start us anywhere).
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "LFSGate"
            return Path.home() / "AppData" / "Local" / "LFSGate"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "LFSGate"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "lfsgate"
        return Path.home() / ".local" / "share" / "lfsgate"

    return default_home().resolve()


def ensure_lfsgate_layout(home: Path) -> LfsGatePaths:
    home.mkdir(parents=True, exist_ok=True)

    db_dir = home / "db"
    content_dir = home / "content"
    logs_dir = home / "logs"
    config_dir = home / "config"

    for path in (db_dir, content_dir, logs_dir, config_dir):
        path.mkdir(parents=True, exist_ok=True)

    return LfsGatePaths(
        home=home,
        db_dir=db_dir,
        content_dir=content_dir,
        logs_dir=logs_dir,
        config_dir=config_dir,
    )
