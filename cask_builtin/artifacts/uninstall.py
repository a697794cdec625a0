"""Cleanup routine declared by a cask: scripts to run and leftovers to delete."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cask_core.errors import ActionError, ArtifactMissing

from .base import Artifact, ArtifactContext, ensure_mapping, require_string, string_tuple

logger = logging.getLogger(__name__)

_KNOWN_KEYS = frozenset({"script", "delete", "rmdir"})


@dataclass(frozen=True)
class ScriptDirective:
    executable: str
    args: tuple[str, ...] = ()
    must_succeed: bool = True

    @classmethod
    def from_spec(cls, value: Any) -> "ScriptDirective":
        if isinstance(value, str):
            return cls(executable=require_string(value, "uninstall.script"))
        raw = ensure_mapping(value, "uninstall.script")
        return cls(
            executable=require_string(raw.get("executable"), "uninstall.script.executable"),
            args=tuple(str(item) for item in raw.get("args") or ()),
            must_succeed=bool(raw.get("must_succeed", True)),
        )


@dataclass(frozen=True)
class UninstallArtifact(Artifact):
    kind = "uninstall"
    cleanup = True

    script: ScriptDirective | None = None
    delete: tuple[str, ...] = field(default_factory=tuple)
    rmdir: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_spec(cls, value: Any) -> "UninstallArtifact":
        raw = ensure_mapping(value, "uninstall")
        unknown = sorted(str(key) for key in raw if key not in _KNOWN_KEYS)
        if unknown:
            raise ValueError(f"unknown uninstall directive(s): {', '.join(unknown)}")
        script = raw.get("script")
        return cls(
            script=ScriptDirective.from_spec(script) if script is not None else None,
            delete=string_tuple(raw.get("delete"), "uninstall.delete"),
            rmdir=string_tuple(raw.get("rmdir"), "uninstall.rmdir"),
        )

    def install(self, context: ArtifactContext) -> None:
        del context

    def remove(self, context: ArtifactContext) -> None:
        """Run the script, then delete leftovers.

        A missing script aborts before anything is deleted. Under ``force`` the
        leftovers are still deleted and the ArtifactMissing is raised afterwards.
        """
        missing: ArtifactMissing | None = None
        if self.script is not None:
            try:
                self._run_script(self.script, context)
            except ArtifactMissing as exc:
                if not context.force:
                    raise
                missing = exc
        for raw in self.delete:
            self._delete(context.expand_path(raw), context)
        for raw in self.rmdir:
            self._rmdir(context.expand_path(raw), context)
        if missing is not None:
            raise missing

    def _run_script(self, directive: ScriptDirective, context: ArtifactContext) -> None:
        executable = context.expand_path(directive.executable)
        if not executable.exists():
            raise ArtifactMissing(executable, token=context.token)
        try:
            _ensure_executable(executable)
        except OSError as exc:
            raise ActionError(f"cannot make {executable} executable: {exc}", token=context.token) from exc
        command = [str(executable), *(context.expand(arg) for arg in directive.args)]
        timeout = max(float(context.script_timeout_seconds), 1.0)
        logger.debug("running uninstall script cmd=%s timeout=%.1fs", command, timeout)
        try:
            result = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(context.staged_path) if context.staged_path.is_dir() else None,
                env={**os.environ, "CASK_TOKEN": context.token, "CASK_VERSION": context.version},
            )
        except subprocess.TimeoutExpired as exc:
            raise ActionError(
                f"uninstall script {executable} timed out after {timeout:.1f}s", token=context.token
            ) from exc
        except OSError as exc:
            raise ActionError(f"uninstall script {executable} could not run: {exc}", token=context.token) from exc
        if result.returncode != 0 and directive.must_succeed:
            detail = (result.stderr or "").strip()
            message = f"uninstall script {executable} failed (exit={result.returncode})"
            if detail:
                message = f"{message}: {detail}"
            raise ActionError(message, token=context.token)

    def _delete(self, target: Path, context: ArtifactContext) -> None:
        if not target.exists() and not target.is_symlink():
            return
        logger.debug("deleting %s", target)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as exc:
            raise ActionError(f"failed to delete {target}: {exc}", token=context.token) from exc

    def _rmdir(self, target: Path, context: ArtifactContext) -> None:
        try:
            if not target.is_dir() or any(target.iterdir()):
                return
            logger.debug("removing empty directory %s", target)
            target.rmdir()
        except OSError as exc:
            raise ActionError(f"failed to remove directory {target}: {exc}", token=context.token) from exc

    def describe(self) -> str:
        parts = []
        if self.script is not None:
            parts.append(f"script {self.script.executable}")
        if self.delete:
            parts.append(f"delete {len(self.delete)} path(s)")
        if self.rmdir:
            parts.append(f"rmdir {len(self.rmdir)} path(s)")
        return "uninstall " + (", ".join(parts) or "(empty)")


def _ensure_executable(path: Path) -> None:
    mode = path.stat().st_mode
    if mode & stat.S_IXUSR:
        return
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
