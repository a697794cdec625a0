from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, Sequence

from .definition import CASKFILE_SUFFIX, CaskDefinition, LiveDefinition, load_definition
from .errors import PackageUnavailable

logger = logging.getLogger(__name__)


class DefinitionSource(Protocol):
    def load_live(self, token: str) -> CaskDefinition: ...


class TapSource:
    """Looks tokens up as ``<tap>/Casks/<token>.yml`` across the configured taps, in order."""

    def __init__(self, taps: Sequence[Path]) -> None:
        self.taps = tuple(taps)

    def caskfile_for(self, token: str) -> Path | None:
        if not token or "/" in token or token.startswith("."):
            return None
        for tap in self.taps:
            candidate = tap / "Casks" / f"{token}{CASKFILE_SUFFIX}"
            if candidate.is_file():
                return candidate
        return None

    def load_live(self, token: str) -> CaskDefinition:
        path = self.caskfile_for(token)
        if path is None:
            raise PackageUnavailable(token, "no cask file found in configured taps")
        logger.debug("loading live definition %s", path)
        return load_definition(path, expected_token=token, definition_cls=LiveDefinition)

    def tokens(self) -> list[str]:
        found: set[str] = set()
        for tap in self.taps:
            casks_dir = tap / "Casks"
            if not casks_dir.is_dir():
                continue
            found.update(path.stem for path in casks_dir.glob(f"*{CASKFILE_SUFFIX}") if path.is_file())
        return sorted(found)
