from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Mapping

from cask_core.errors import ActionError


@dataclass(frozen=True)
class ArtifactContext:
    """Everything an artifact action needs to know about where a cask lives."""

    token: str
    version: str
    staged_path: Path
    appdir: Path
    binarydir: Path
    caskroom: Path
    force: bool = False
    script_timeout_seconds: float = 60.0

    def variables(self) -> dict[str, str]:
        return {
            "token": self.token,
            "version": self.version,
            "staged_path": str(self.staged_path),
            "appdir": str(self.appdir),
            "binarydir": str(self.binarydir),
            "caskroom": str(self.caskroom),
        }

    def expand(self, value: str) -> str:
        try:
            return value.format_map(_Placeholders(self.variables()))
        except (ValueError, IndexError, AttributeError) as exc:
            raise ActionError(f"cannot expand {value!r}: {exc}", token=self.token) from exc

    def expand_path(self, value: str, *, base: Path | None = None) -> Path:
        path = Path(self.expand(value)).expanduser()
        if not path.is_absolute():
            path = (base or self.staged_path) / path
        return path


class _Placeholders(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class Artifact:
    """Capability interface shared by every artifact kind declared in a cask file."""

    kind: ClassVar[str] = ""
    cleanup: ClassVar[bool] = False

    @classmethod
    def from_spec(cls, value: Any) -> "Artifact":
        raise NotImplementedError

    def install(self, context: ArtifactContext) -> None:
        raise NotImplementedError

    def remove(self, context: ArtifactContext) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        return self.kind


def require_string(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{what} must be a non-empty string")
    return value.strip()


def string_tuple(value: Any, what: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (require_string(value, what),)
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a string or a list of strings")
    return tuple(require_string(item, what) for item in value)


def ensure_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    raise ValueError(f"{what} must be a mapping")
