"""Error hierarchy raised by the caskroom engine."""

from __future__ import annotations

from typing import Sequence


class CaskError(RuntimeError):
    """Base class for every failure surfaced by the engine."""

    def __init__(self, message: str, *, token: str | None = None) -> None:
        super().__init__(message)
        self.token = token


class NoPackagesSpecified(CaskError):
    def __init__(self, detail: str | None = None) -> None:
        message = "this command requires a cask token"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class PackageUnavailable(CaskError):
    def __init__(self, token: str, reason: str | None = None) -> None:
        message = f"cask '{token}' is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, token=token)


class PackageNotInstalled(CaskError):
    def __init__(self, token: str) -> None:
        super().__init__(f"cask '{token}' is not installed", token=token)


class CaskAlreadyInstalled(CaskError):
    def __init__(self, token: str, version: str) -> None:
        super().__init__(f"cask '{token}' {version} is already installed", token=token)
        self.version = version


class DefinitionUnavailable(CaskError):
    def __init__(self, token: str, version: str) -> None:
        super().__init__(
            f"no usable definition found for cask '{token}' {version} (live or saved)",
            token=token,
        )
        self.version = version


class DefinitionParseError(CaskError):
    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"cannot load cask definition {path}: {reason}")
        self.path = path


class ArtifactMissing(CaskError):
    def __init__(self, path: object, *, token: str | None = None) -> None:
        super().__init__(f"uninstall target {path} does not exist", token=token)
        self.path = path


class ActionError(CaskError):
    """An artifact action failed for a reason other than its target being absent."""


class MultipleCaskErrors(CaskError):
    def __init__(self, errors: Sequence[CaskError]) -> None:
        self.errors = tuple(errors)
        lines = [f"{len(self.errors)} casks failed:"]
        lines.extend(f"  {error}" for error in self.errors)
        super().__init__("\n".join(lines))
