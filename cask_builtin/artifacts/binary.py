"""Command-line binaries linked into the binary directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cask_core.errors import ActionError

from .base import Artifact, ArtifactContext, require_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BinaryArtifact(Artifact):
    kind = "binary"

    source: str
    target: str | None = None

    @classmethod
    def from_spec(cls, value: Any) -> "BinaryArtifact":
        if isinstance(value, dict):
            return cls(
                source=require_string(value.get("source"), "binary.source"),
                target=require_string(value["target"], "binary.target") if value.get("target") else None,
            )
        return cls(source=require_string(value, "binary"))

    def link_path(self, context: ArtifactContext) -> Path:
        name = self.target or Path(context.expand(self.source)).name
        return context.expand_path(name, base=context.binarydir)

    def install(self, context: ArtifactContext) -> None:
        source = context.expand_path(self.source)
        link = self.link_path(context)
        if link.exists() or link.is_symlink():
            raise ActionError(f"it seems there is already a binary at {link}", token=context.token)
        logger.debug("linking binary %s -> %s", link, source)
        try:
            link.parent.mkdir(parents=True, exist_ok=True)
            link.symlink_to(source)
        except OSError as exc:
            raise ActionError(f"failed to link {link}: {exc}", token=context.token) from exc

    def remove(self, context: ArtifactContext) -> None:
        link = self.link_path(context)
        if link.is_symlink():
            logger.debug("unlinking binary %s", link)
            try:
                link.unlink()
            except OSError as exc:
                raise ActionError(f"failed to unlink {link}: {exc}", token=context.token) from exc
            return
        if link.exists():
            raise ActionError(f"{link} is not a symlink; refusing to remove it", token=context.token)
        logger.debug("binary %s already absent", link)

    def describe(self) -> str:
        return f"binary {self.target or Path(self.source).name}"
