"""Workspace configuration for the caskroom engine."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_RELATIVE_PATH = Path("config") / "config.toml"
WORKSPACE_ENV = "CASKROOM_HOME"
DEFAULT_SCRIPT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class CaskConfig:
    caskroom: Path
    appdir: Path
    binarydir: Path
    taps: tuple[Path, ...] = ()
    lock_dir: Path | None = None
    script_timeout_seconds: float = DEFAULT_SCRIPT_TIMEOUT_SECONDS

    @classmethod
    def for_workspace(cls, workspace_root: Path) -> "CaskConfig":
        root = workspace_root.resolve()
        return cls(
            caskroom=root / "Caskroom",
            appdir=root / "Applications",
            binarydir=root / "bin",
            taps=(root / "taps" / "default",),
        )

    @property
    def locks(self) -> Path:
        return self.lock_dir if self.lock_dir is not None else self.caskroom / ".locks"


def default_workspace_root() -> Path:
    raw = os.getenv(WORKSPACE_ENV, "").strip()
    if raw:
        return Path(raw).expanduser().resolve()
    return (Path.home() / ".caskroom").resolve()


def _load_caskroom_section(workspace_root: Path) -> dict[str, Any]:
    config_path = workspace_root / CONFIG_RELATIVE_PATH
    if not config_path.exists():
        return {}
    try:
        payload = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    section = payload.get("caskroom")
    return section if isinstance(section, dict) else {}


def _path_setting(workspace_root: Path, value: Any, default: Path) -> Path:
    raw = str(value or "").strip()
    if not raw:
        return default
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = workspace_root / path
    return path.resolve()


def load_config(workspace_root: Path | None = None) -> CaskConfig:
    root = (workspace_root or default_workspace_root()).resolve()
    defaults = CaskConfig.for_workspace(root)
    section = _load_caskroom_section(root)

    taps_raw = section.get("taps")
    if isinstance(taps_raw, list) and taps_raw:
        taps = tuple(_path_setting(root, item, root) for item in taps_raw if str(item).strip())
    else:
        taps = defaults.taps

    lock_dir = section.get("lock_dir")
    return CaskConfig(
        caskroom=_path_setting(root, section.get("caskroom"), defaults.caskroom),
        appdir=_path_setting(root, section.get("appdir"), defaults.appdir),
        binarydir=_path_setting(root, section.get("binarydir"), defaults.binarydir),
        taps=taps,
        lock_dir=_path_setting(root, lock_dir, root) if lock_dir else None,
        script_timeout_seconds=max(
            float(section.get("script_timeout_seconds", DEFAULT_SCRIPT_TIMEOUT_SECONDS)), 1.0
        ),
    )
