from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Any

from cask_core.config import CaskConfig, default_workspace_root, load_config


class _WorkspaceAwareCommand:
    prefix = "cask"

    @staticmethod
    def add_workspace_argument(parser: ArgumentParser) -> None:
        parser.add_argument(
            "--workspace-dir",
            default=None,
            help="Workspace root holding config/config.toml (default: $CASKROOM_HOME or ~/.caskroom)",
        )

    def _resolve(self, workspace_dir: Any, start_dir: Path | None = None) -> Path:
        raw = str(workspace_dir or "").strip()
        if not raw:
            return default_workspace_root()
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = (start_dir or Path.cwd()) / path
        return path.resolve()

    def _config(self, argv: Namespace) -> CaskConfig:
        workspace_root = self._resolve(getattr(argv, "workspace_dir", None), getattr(argv, "start_dir", None))
        return load_config(workspace_root)

    def _say(self, message: str) -> None:
        print(f"[{self.prefix}] {message}")

    def _reject_unknown(self, argv: Namespace) -> bool:
        unknown = list(getattr(argv, "unknown_options", None) or [])
        if not unknown:
            return False
        self._say(f"unrecognized arguments: {' '.join(unknown)}")
        return True
