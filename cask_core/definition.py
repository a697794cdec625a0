"""Cask definitions and the YAML cask file loader."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Mapping

import yaml

from cask_builtin.artifacts import Artifact, build_artifact

from .caskroom import check_component
from .errors import DefinitionParseError

CASKFILE_SUFFIX = ".yml"


@dataclass(frozen=True)
class CaskDefinition:
    """A resolved cask: token, pinned version and the ordered artifacts it declares.

    Subclasses only record where the definition came from; the engine treats
    every provenance the same way.
    """

    provenance: ClassVar[str] = "unknown"

    token: str
    version: str
    artifacts: tuple[Artifact, ...] = ()
    path: Path | None = None
    name: str | None = None
    source: Path | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def cleanup_artifacts(self) -> tuple[Artifact, ...]:
        return tuple(artifact for artifact in self.artifacts if artifact.cleanup)

    @property
    def removal_artifacts(self) -> tuple[Artifact, ...]:
        return tuple(artifact for artifact in self.artifacts if not artifact.cleanup)

    def __str__(self) -> str:
        return f"{self.token} {self.version}"


@dataclass(frozen=True)
class LiveDefinition(CaskDefinition):
    provenance: ClassVar[str] = "live"


@dataclass(frozen=True)
class ReconstructedDefinition(CaskDefinition):
    provenance: ClassVar[str] = "reconstructed"


def load_definition(
    path: Path,
    *,
    expected_token: str | None = None,
    definition_cls: type[CaskDefinition] = LiveDefinition,
) -> CaskDefinition:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DefinitionParseError(path, str(exc)) from exc
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DefinitionParseError(path, f"invalid YAML: {exc}") from exc
    return parse_definition(
        payload,
        path=path,
        expected_token=expected_token or path.stem,
        definition_cls=definition_cls,
    )


def parse_definition(
    payload: Any,
    *,
    path: Path | None = None,
    expected_token: str | None = None,
    definition_cls: type[CaskDefinition] = LiveDefinition,
) -> CaskDefinition:
    where = path if path is not None else "<memory>"
    if not isinstance(payload, Mapping):
        raise DefinitionParseError(where, "expected a mapping at the top level")

    token = str(payload.get("cask") or "").strip()
    if not token:
        raise DefinitionParseError(where, "'cask' (the token) is required")
    try:
        check_component(token, "token")
    except ValueError as exc:
        raise DefinitionParseError(where, str(exc)) from exc
    if expected_token is not None and token != expected_token:
        raise DefinitionParseError(where, f"declares token '{token}', expected '{expected_token}'")

    version = payload.get("version")
    if version is None or not str(version).strip():
        raise DefinitionParseError(where, "'version' is required")
    version = str(version).strip()
    try:
        check_component(version, "version")
    except ValueError as exc:
        raise DefinitionParseError(where, str(exc)) from exc

    artifacts_raw = payload.get("artifacts") or []
    if not isinstance(artifacts_raw, list):
        raise DefinitionParseError(where, "'artifacts' must be a list")
    artifacts: list[Artifact] = []
    for index, entry in enumerate(artifacts_raw):
        if not isinstance(entry, Mapping) or len(entry) != 1:
            raise DefinitionParseError(where, f"artifacts[{index}] must be a single-key mapping")
        ((kind, value),) = entry.items()
        try:
            artifacts.append(build_artifact(str(kind), value))
        except ValueError as exc:
            raise DefinitionParseError(where, f"artifacts[{index}]: {exc}") from exc

    source = None
    source_raw = str(payload.get("source") or "").strip()
    if source_raw:
        source = Path(source_raw).expanduser()
        if not source.is_absolute() and path is not None:
            source = path.parent / source

    name = payload.get("name")
    return definition_cls(
        token=token,
        version=version,
        artifacts=tuple(artifacts),
        path=path,
        name=str(name) if name is not None else None,
        source=source,
        raw=dict(payload),
    )
