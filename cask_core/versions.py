"""Read-only view of which versions of a cask are installed."""

from __future__ import annotations

from .caskroom import METADATA_DIRNAME, CaskroomLayout
from .snapshots import SnapshotStore
from .types import InstalledVersion, MetadataSnapshot


class VersionStore:
    def __init__(self, layout: CaskroomLayout, snapshots: SnapshotStore | None = None) -> None:
        self.layout = layout
        self.snapshots = snapshots or SnapshotStore(layout)

    def records(self, token: str) -> list[InstalledVersion]:
        """Installed versions of ``token``, oldest install first.

        Version directories without any snapshot sort first by name; versions
        known from snapshots follow, ordered by their newest snapshot.
        """
        root = self.layout.token_root(token)
        if not root.is_dir():
            return []

        newest: dict[str, MetadataSnapshot] = {}
        for snapshot in self.snapshots.snapshots(token):
            newest[snapshot.version] = snapshot

        bare = sorted(
            path.name
            for path in root.iterdir()
            if path.is_dir() and path.name != METADATA_DIRNAME and path.name not in newest
        )
        records = [InstalledVersion(token=token, version=version, path=root / version) for version in bare]
        for snapshot in sorted(newest.values(), key=lambda item: (item.timestamp, item.version)):
            records.append(
                InstalledVersion(
                    token=token,
                    version=snapshot.version,
                    path=self.layout.version_dir(token, snapshot.version),
                    timestamp=snapshot.timestamp,
                    snapshot=snapshot,
                )
            )
        return records

    def installed_versions(self, token: str) -> list[str]:
        return [record.version for record in self.records(token)]

    def is_installed(self, token: str) -> bool:
        return bool(self.records(token))

    def latest(self, token: str) -> InstalledVersion | None:
        records = self.records(token)
        return records[-1] if records else None

    def get(self, token: str, version: str) -> InstalledVersion | None:
        for record in self.records(token):
            if record.version == version:
                return record
        return None
