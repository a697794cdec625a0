"""Uninstall pipeline: resolve, clean, remove artifacts, prune."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from .caskroom import CaskroomLayout, token_lock
from .config import CaskConfig
from .dispatch import ArtifactUninstaller
from .errors import ActionError, CaskError, NoPackagesSpecified, PackageNotInstalled, PackageUnavailable
from .pruner import CaskroomPruner
from .resolver import DefinitionResolver
from .snapshots import SnapshotStore
from .sources import DefinitionSource, TapSource
from .types import TokenOutcome, UninstallOptions, UninstallReport
from .versions import VersionStore

logger = logging.getLogger(__name__)

FORCE_FLAGS = frozenset({"--force", "-f"})


@dataclass(frozen=True)
class UninstallRequest:
    tokens: tuple[str, ...]
    force: bool = False

    @classmethod
    def build(
        cls,
        tokens: Iterable[str],
        *,
        force: bool = False,
        unknown_options: Sequence[str] = (),
    ) -> "UninstallRequest":
        if unknown_options:
            raise NoPackagesSpecified(f"unrecognized option(s): {' '.join(unknown_options)}")
        cleaned = tuple(token.strip() for token in tokens if token and token.strip())
        if not cleaned:
            raise NoPackagesSpecified()
        return cls(tokens=cleaned, force=force)

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "UninstallRequest":
        tokens: list[str] = []
        unknown: list[str] = []
        force = False
        for arg in args:
            if arg in FORCE_FLAGS:
                force = True
            elif arg.startswith("-"):
                unknown.append(arg)
            else:
                tokens.append(arg)
        return cls.build(tokens, force=force, unknown_options=unknown)


def still_installed_message(token: str, versions: Sequence[str]) -> str:
    single = len(versions) == 1
    return (
        f"{token} {', '.join(versions)} {'is' if single else 'are'} still installed.\n"
        f"Run `cask uninstall {token}` again to remove {'it' if single else 'the next one'}."
    )


class Uninstaller:
    """Removes one installed version per requested token.

    The version taken is the most recently installed one, i.e. the one whose
    install snapshot is newest. Tokens are processed in request order and a
    failure on one never stops the next.
    """

    def __init__(
        self,
        config: CaskConfig,
        *,
        source: DefinitionSource | None = None,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.config = config
        self.echo = echo
        self.layout = CaskroomLayout(config.caskroom)
        self.snapshots = SnapshotStore(self.layout)
        self.versions = VersionStore(self.layout, self.snapshots)
        self.resolver = DefinitionResolver(source or TapSource(config.taps), self.snapshots)
        self.dispatch = ArtifactUninstaller(config)
        self.pruner = CaskroomPruner(self.layout, self.versions)

    def run(self, request: UninstallRequest) -> UninstallReport:
        for token in request.tokens:
            self.ensure_nameable(token)

        report = UninstallReport()
        for token in request.tokens:
            report.outcomes.append(self.uninstall_token(token, force=request.force))
        return report

    def ensure_nameable(self, token: str) -> None:
        try:
            self.resolver.resolve_any(token)
        except ValueError as exc:
            raise PackageUnavailable(token, str(exc)) from exc

    def uninstall_token(self, token: str, *, force: bool = False) -> TokenOutcome:
        if not force and not self.versions.is_installed(token):
            return TokenOutcome(token=token, error=PackageNotInstalled(token))

        version: str | None = None
        try:
            with token_lock(self.config.locks, token):
                record = self.versions.latest(token)
                if record is None:
                    definition = self.resolver.resolve_any(token)
                    version = definition.version
                    logger.debug("%s is not installed; forcing cleanup of %s", token, definition)
                else:
                    version = record.version
                    definition = self.resolver.resolve(token, version)

                result = self.dispatch.uninstall(definition, version, UninstallOptions(force=force))
                self.pruner.prune(token, version)
                remaining = tuple(self.versions.installed_versions(token))
        except CaskError as exc:
            logger.debug("uninstall of %s failed", token, exc_info=True)
            return TokenOutcome(token=token, version=version, error=exc)
        except (OSError, ValueError) as exc:
            logger.debug("uninstall of %s failed", token, exc_info=True)
            return TokenOutcome(token=token, version=version, error=ActionError(str(exc), token=token))

        if remaining:
            self.echo(still_installed_message(token, remaining))
        return TokenOutcome(token=token, version=version, remaining=remaining, failures=result.failures)


def uninstall(
    *args: str,
    config: CaskConfig,
    source: DefinitionSource | None = None,
    echo: Callable[[str], None] = print,
) -> UninstallReport:
    """Uninstall the casks named in ``args`` (tokens plus ``--force``), raising on any failure."""
    request = UninstallRequest.from_args(args)
    report = Uninstaller(config, source=source, echo=echo).run(request)
    report.raise_for_failures()
    return report
