"""Caskroom datatypes."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import CaskError, MultipleCaskErrors


@dataclass(frozen=True)
class MetadataSnapshot:
    token: str
    version: str
    timestamp: str
    path: Path

    @property
    def caskfile(self) -> Path:
        return self.path / "Casks" / f"{self.token}.yml"


@dataclass(frozen=True)
class InstalledVersion:
    token: str
    version: str
    path: Path
    timestamp: str | None = None
    snapshot: MetadataSnapshot | None = None


@dataclass(frozen=True)
class UninstallOptions:
    force: bool = False


@dataclass(frozen=True)
class DispatchResult:
    removed: tuple[str, ...] = ()
    failures: tuple[CaskError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class TokenOutcome:
    token: str
    version: str | None = None
    error: CaskError | None = None
    remaining: tuple[str, ...] = ()
    failures: tuple[CaskError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class UninstallReport:
    outcomes: list[TokenOutcome] = field(default_factory=list)

    @property
    def failures(self) -> list[CaskError]:
        return [outcome.error for outcome in self.outcomes if outcome.error is not None]

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        failures = self.failures
        if not failures:
            return
        if len(failures) == 1:
            raise failures[0]
        raise MultipleCaskErrors(failures)
