from __future__ import annotations

from pathlib import Path

from lfsgate_core.home import ensure_lfsgate_layout, resolve_lfsgate_home


def test_resolve_lfsgate_home_from_env(tmp_path: Path) -> None:
    home = resolve_lfsgate_home({"LFSGATE_HOME": str(tmp_path)})
    assert home == tmp_path.resolve()


def test_ensure_lfsgate_layout_creates_required_dirs(tmp_path: Path) -> None:
    paths = ensure_lfsgate_layout(tmp_path)

    assert paths.home.exists()
    assert paths.db_dir.is_dir()
    assert paths.content_dir.is_dir()
    assert paths.logs_dir.is_dir()
    assert paths.config_dir.is_dir()
    assert paths.core_config_path == tmp_path / "config" / "core.json"
