"""On-disk layout of the caskroom.

    <caskroom>/<token>/<version>/                                 staged files
    <caskroom>/<token>/.metadata/<version>/<timestamp>/Casks/<token>.yml
"""

from __future__ import annotations

import fcntl
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

METADATA_DIRNAME = ".metadata"
LOCK_SUFFIX = ".lock"


class CaskroomLayout:
    def __init__(self, root: Path) -> None:
        self.root = root

    def token_root(self, token: str) -> Path:
        check_component(token, "token")
        return self.root / token

    def version_dir(self, token: str, version: str) -> Path:
        check_component(version, "version")
        return self.token_root(token) / version

    def metadata_root(self, token: str) -> Path:
        return self.token_root(token) / METADATA_DIRNAME

    def metadata_version_dir(self, token: str, version: str) -> Path:
        check_component(version, "version")
        return self.metadata_root(token) / version

    def tokens(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            path.name for path in self.root.iterdir() if path.is_dir() and not path.name.startswith(".")
        )


def check_component(value: str, what: str) -> None:
    if not value or value in {".", ".."} or "/" in value or "\\" in value or value == METADATA_DIRNAME:
        raise ValueError(f"invalid cask {what}: {value!r}")


@contextmanager
def token_lock(lock_dir: Path, token: str) -> Iterator[Path]:
    """Hold an exclusive lock on ``token`` for the duration of the block.

    Lock files outlive the token and are never unlinked: a process blocked in
    flock() on the old file would otherwise run alongside one that opened a
    fresh file at the same path.
    """
    check_component(token, "token")
    lock_dir.mkdir(parents=True, exist_ok=True)
    lock_path = lock_dir / f"{token}{LOCK_SUFFIX}"
    # append mode so a crash between open() and flock() never truncates the file
    with open(lock_path, "a") as lock_fd:
        fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX)
        try:
            yield lock_path
        finally:
            fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)
