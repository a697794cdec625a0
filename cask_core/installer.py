"""Stages a cask from a local directory, installs its artifacts and records the snapshot."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from cask_builtin.artifacts import Artifact

from .caskroom import CaskroomLayout, token_lock
from .config import CaskConfig
from .definition import CaskDefinition
from .dispatch import ArtifactUninstaller
from .errors import ActionError, CaskAlreadyInstalled, CaskError
from .snapshots import SnapshotStore
from .sources import DefinitionSource, TapSource
from .types import InstalledVersion
from .versions import VersionStore

logger = logging.getLogger(__name__)


class Installer:
    def __init__(self, config: CaskConfig, *, source: DefinitionSource | None = None) -> None:
        self.config = config
        self.source = source or TapSource(config.taps)
        self.layout = CaskroomLayout(config.caskroom)
        self.snapshots = SnapshotStore(self.layout)
        self.versions = VersionStore(self.layout, self.snapshots)
        self.artifacts = ArtifactUninstaller(config)

    def install_token(self, token: str, *, force: bool = False) -> InstalledVersion:
        return self.install(self.source.load_live(token), force=force)

    def install(
        self,
        definition: CaskDefinition,
        *,
        force: bool = False,
        timestamp: str | None = None,
    ) -> InstalledVersion:
        token, version = definition.token, definition.version
        with token_lock(self.config.locks, token):
            if self.versions.get(token, version) is not None and not force:
                raise CaskAlreadyInstalled(token, version)

            staged = self.layout.version_dir(token, version)
            context = self.artifacts.context_for(definition, version, force=force)
            self._stage(definition, staged)

            installed: list[Artifact] = []
            try:
                for artifact in definition.artifacts:
                    if force and not artifact.cleanup:
                        artifact.remove(context)
                    logger.debug("install %s: %s", definition, artifact.describe())
                    artifact.install(context)
                    installed.append(artifact)
            except CaskError:
                self._roll_back(definition, installed, staged)
                raise

            snapshot = self.snapshots.record(definition, timestamp=timestamp)
            logger.debug("installed %s into %s", definition, staged)
            return InstalledVersion(
                token=token,
                version=version,
                path=staged,
                timestamp=snapshot.timestamp,
                snapshot=snapshot,
            )

    def _stage(self, definition: CaskDefinition, staged: Path) -> None:
        source = definition.source
        if source is None:
            staged.mkdir(parents=True, exist_ok=True)
            return
        if not source.is_dir():
            raise ActionError(f"cask source {source} is not a directory", token=definition.token)
        logger.debug("staging %s -> %s", source, staged)
        shutil.copytree(source, staged, symlinks=True, dirs_exist_ok=True)

    def _roll_back(self, definition: CaskDefinition, installed: list[Artifact], staged: Path) -> None:
        context = self.artifacts.context_for(definition, definition.version, force=True)
        for artifact in reversed(installed):
            if artifact.cleanup:
                continue
            try:
                artifact.remove(context)
            except CaskError as exc:
                logger.warning("rollback of %s failed: %s", artifact.describe(), exc)
        shutil.rmtree(staged, ignore_errors=True)
        root = self.layout.token_root(definition.token)
        if root.is_dir() and not any(root.iterdir()):
            root.rmdir()
