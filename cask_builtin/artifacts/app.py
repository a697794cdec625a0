"""Application bundle artifact: moved into the app directory on install."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cask_core.errors import ActionError

from .base import Artifact, ArtifactContext, require_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppArtifact(Artifact):
    kind = "app"

    source: str
    target: str | None = None

    @classmethod
    def from_spec(cls, value: Any) -> "AppArtifact":
        if isinstance(value, dict):
            return cls(
                source=require_string(value.get("source"), "app.source"),
                target=require_string(value["target"], "app.target") if value.get("target") else None,
            )
        return cls(source=require_string(value, "app"))

    def target_path(self, context: ArtifactContext) -> Path:
        name = self.target or Path(context.expand(self.source)).name
        return context.expand_path(name, base=context.appdir)

    def install(self, context: ArtifactContext) -> None:
        source = context.expand_path(self.source)
        target = self.target_path(context)
        if not source.exists():
            raise ActionError(f"app source {source} does not exist", token=context.token)
        if target.exists() or target.is_symlink():
            raise ActionError(f"it seems there is already an app at {target}", token=context.token)
        logger.debug("moving app %s -> %s", source, target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as exc:
            raise ActionError(f"failed to move {source} to {target}: {exc}", token=context.token) from exc

    def remove(self, context: ArtifactContext) -> None:
        target = self.target_path(context)
        if not target.exists() and not target.is_symlink():
            logger.debug("app %s already absent", target)
            return
        logger.debug("removing app %s", target)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as exc:
            raise ActionError(f"failed to remove {target}: {exc}", token=context.token) from exc

    def describe(self) -> str:
        return f"app {self.target or Path(self.source).name}"
