from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Literal

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
CSS_DIR = BASE_DIR / "css"

AssetKind = Literal["templates", "css"]

_ASSET_DIRS: dict[str, Path] = {
    "templates": TEMPLATES_DIR,
    "css": CSS_DIR,
}


def _asset_path(kind: AssetKind, name: str) -> Path:
    # Assets are addressed by a single path segment; anything else is simply not found.
    if not name or "/" in name or "\\" in name or name.startswith("."):
        raise FileNotFoundError(name)

    path = _ASSET_DIRS[kind] / name
    if not path.is_file():
        raise FileNotFoundError(name)
    return path


def open_asset(kind: AssetKind, name: str) -> BinaryIO:
    return _asset_path(kind, name).open("rb")


def read_asset_as_string(kind: AssetKind, name: str) -> str:
    return _asset_path(kind, name).read_text(encoding="utf-8")
