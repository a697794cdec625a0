"""Chooses which definition of a cask to trust when uninstalling it."""

from __future__ import annotations

import logging
from dataclasses import replace

from .definition import CaskDefinition
from .errors import CaskError, DefinitionParseError, DefinitionUnavailable, PackageUnavailable
from .snapshots import SnapshotStore
from .sources import DefinitionSource

logger = logging.getLogger(__name__)


class DefinitionResolver:
    def __init__(self, source: DefinitionSource, snapshots: SnapshotStore) -> None:
        self.source = source
        self.snapshots = snapshots

    def load_live(self, token: str) -> CaskDefinition | None:
        try:
            definition = self.source.load_live(token)
        except PackageUnavailable:
            return None
        except DefinitionParseError as exc:
            logger.warning("ignoring unreadable live definition for %s: %s", token, exc)
            return None
        if definition.token != token:
            logger.warning("live definition for %s declares token %s; ignoring it", token, definition.token)
            return None
        return definition

    def resolve(self, token: str, version: str) -> CaskDefinition:
        """Definition for the installed ``version`` of ``token``.

        The live definition wins only when it still declares ``version``;
        otherwise the newest parseable install snapshot of that version is used.
        """
        live = self.load_live(token)
        if live is not None and live.version == version:
            logger.debug("resolved %s %s from live definition %s", token, version, live.path)
            return live

        reconstructed = self._from_snapshots(token, version)
        if reconstructed is not None:
            return reconstructed
        raise DefinitionUnavailable(token, version)

    def resolve_any(self, token: str) -> CaskDefinition:
        """Any definition naming ``token``: live first, then the newest snapshot of any version."""
        live = self.load_live(token)
        if live is not None:
            return live
        reconstructed = self._from_snapshots(token, None)
        if reconstructed is not None:
            return reconstructed
        raise PackageUnavailable(token)

    def _from_snapshots(self, token: str, version: str | None) -> CaskDefinition | None:
        for snapshot in reversed(self.snapshots.snapshots(token, version)):
            try:
                definition = self.snapshots.load(snapshot)
            except CaskError as exc:
                logger.warning("skipping snapshot %s: %s", snapshot.path, exc)
                continue
            if version is not None and definition.version != version:
                logger.debug(
                    "snapshot %s declares version %s; pinning to installed version %s",
                    snapshot.path,
                    definition.version,
                    version,
                )
                definition = replace(definition, version=version)
            logger.debug("resolved %s %s from snapshot %s", token, definition.version, snapshot.path)
            return definition
        return None
