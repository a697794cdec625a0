from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .caskroom import CaskroomLayout
from .errors import ActionError
from .versions import VersionStore

logger = logging.getLogger(__name__)


class CaskroomPruner:
    """Deletes caskroom bookkeeping once a version's artifacts are gone."""

    def __init__(self, layout: CaskroomLayout, versions: VersionStore | None = None) -> None:
        self.layout = layout
        self.versions = versions or VersionStore(layout)

    def prune(self, token: str, version: str) -> bool:
        """Remove ``version`` of ``token``; returns True when the token root went with it."""
        _rmtree(self.layout.version_dir(token, version), token)
        _rmtree(self.layout.metadata_version_dir(token, version), token)

        root = self.layout.token_root(token)
        if not root.exists():
            return True
        if self.versions.installed_versions(token):
            return False
        logger.debug("no versions of %s remain; removing %s", token, root)
        _rmtree(root, token)
        return True


def _rmtree(path: Path, token: str) -> None:
    try:
        if path.is_symlink():
            path.unlink()
        elif path.is_dir():
            logger.debug("removing %s", path)
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()
    except OSError as exc:
        raise ActionError(f"failed to prune {path}: {exc}", token=token) from exc
