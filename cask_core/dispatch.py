"""Runs a definition's cleanup routines and artifact removals in a fixed order."""

from __future__ import annotations

import logging

from cask_builtin.artifacts import Artifact, ArtifactContext

from .caskroom import CaskroomLayout
from .config import CaskConfig
from .definition import CaskDefinition
from .errors import ArtifactMissing, CaskError
from .types import DispatchResult, UninstallOptions

logger = logging.getLogger(__name__)


class ArtifactUninstaller:
    def __init__(self, config: CaskConfig) -> None:
        self.config = config
        self.layout = CaskroomLayout(config.caskroom)

    def context_for(self, definition: CaskDefinition, version: str, *, force: bool = False) -> ArtifactContext:
        return ArtifactContext(
            token=definition.token,
            version=version,
            staged_path=self.layout.version_dir(definition.token, version),
            appdir=self.config.appdir,
            binarydir=self.config.binarydir,
            caskroom=self.config.caskroom,
            force=force,
            script_timeout_seconds=self.config.script_timeout_seconds,
        )

    def uninstall(
        self,
        definition: CaskDefinition,
        version: str,
        options: UninstallOptions | None = None,
    ) -> DispatchResult:
        """Run cleanup routines, then remove artifacts in declared order.

        Without ``force`` the first failure is raised and nothing after it runs.
        With ``force`` failures are logged, collected and skipped over.
        """
        options = options or UninstallOptions()
        context = self.context_for(definition, version, force=options.force)
        removed: list[str] = []
        failures: list[CaskError] = []

        stages = (("clean", definition.cleanup_artifacts), ("remove", definition.removal_artifacts))
        for stage, artifacts in stages:
            for artifact in artifacts:
                logger.debug("%s %s: %s", stage, definition, artifact.describe())
                try:
                    artifact.remove(context)
                except CaskError as exc:
                    if not options.force:
                        raise
                    _log_forced(definition, artifact, exc)
                    failures.append(exc)
                    continue
                removed.append(artifact.describe())

        return DispatchResult(removed=tuple(removed), failures=tuple(failures))


def _log_forced(definition: CaskDefinition, artifact: Artifact, exc: CaskError) -> None:
    if isinstance(exc, ArtifactMissing):
        logger.warning("%s: %s (continuing because of --force)", definition.token, exc)
    else:
        logger.warning(
            "%s: %s failed: %s (continuing because of --force)", definition.token, artifact.describe(), exc
        )
