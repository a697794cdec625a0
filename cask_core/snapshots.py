"""Install-time definition snapshots kept under ``<token>/.metadata``."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone

from .caskroom import CaskroomLayout
from .definition import CaskDefinition, ReconstructedDefinition, load_definition
from .types import MetadataSnapshot

logger = logging.getLogger(__name__)


def utc_timestamp(now: datetime | None = None) -> str:
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y%m%d%H%M%S.") + f"{moment.microsecond // 1000:03d}"


class SnapshotStore:
    def __init__(self, layout: CaskroomLayout) -> None:
        self.layout = layout

    def snapshots(self, token: str, version: str | None = None) -> list[MetadataSnapshot]:
        """Snapshots for ``token`` (optionally one version), oldest timestamp first."""
        metadata_root = self.layout.metadata_root(token)
        if not metadata_root.is_dir():
            return []
        found: list[MetadataSnapshot] = []
        for version_dir in metadata_root.iterdir():
            if not version_dir.is_dir():
                continue
            if version is not None and version_dir.name != version:
                continue
            for stamp_dir in version_dir.iterdir():
                if stamp_dir.is_dir():
                    found.append(
                        MetadataSnapshot(
                            token=token,
                            version=version_dir.name,
                            timestamp=stamp_dir.name,
                            path=stamp_dir,
                        )
                    )
        return sorted(found, key=lambda item: (item.timestamp, item.version))

    def latest(self, token: str, version: str | None = None) -> MetadataSnapshot | None:
        found = self.snapshots(token, version)
        return found[-1] if found else None

    def load(self, snapshot: MetadataSnapshot) -> CaskDefinition:
        return load_definition(
            snapshot.caskfile,
            expected_token=snapshot.token,
            definition_cls=ReconstructedDefinition,
        )

    def record(self, definition: CaskDefinition, *, timestamp: str | None = None) -> MetadataSnapshot:
        if definition.path is None:
            raise ValueError(f"cannot snapshot {definition.token}: definition has no cask file")
        stamp = timestamp or utc_timestamp()
        snapshot = MetadataSnapshot(
            token=definition.token,
            version=definition.version,
            timestamp=stamp,
            path=self.layout.metadata_version_dir(definition.token, definition.version) / stamp,
        )
        snapshot.caskfile.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(definition.path, snapshot.caskfile)
        logger.debug("recorded snapshot %s", snapshot.caskfile)
        return snapshot
