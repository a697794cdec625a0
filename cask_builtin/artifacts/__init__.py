"""Built-in artifact kinds understood in cask files."""

from typing import Any

from .app import AppArtifact
from .base import Artifact, ArtifactContext
from .binary import BinaryArtifact
from .uninstall import ScriptDirective, UninstallArtifact

ARTIFACT_KINDS: dict[str, type[Artifact]] = {
    AppArtifact.kind: AppArtifact,
    BinaryArtifact.kind: BinaryArtifact,
    UninstallArtifact.kind: UninstallArtifact,
}


def build_artifact(kind: str, value: Any) -> Artifact:
    try:
        artifact_cls = ARTIFACT_KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown artifact kind '{kind}'") from None
    return artifact_cls.from_spec(value)


__all__ = [
    "ARTIFACT_KINDS",
    "AppArtifact",
    "Artifact",
    "ArtifactContext",
    "BinaryArtifact",
    "ScriptDirective",
    "UninstallArtifact",
    "build_artifact",
]
