"""Builtin uninstall command."""

from __future__ import annotations

import logging
from argparse import ArgumentParser, Namespace

from cask_core.api import caskcommand
from cask_core.errors import CaskError
from cask_core.uninstall import Uninstaller, UninstallRequest

from .commands import _WorkspaceAwareCommand

logger = logging.getLogger(__name__)


@caskcommand(name="uninstall", group="cask")
class UninstallCommand(_WorkspaceAwareCommand):
    """Uninstall the most recently installed version of each given cask."""

    prefix = "cask:uninstall"

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        cls.add_workspace_argument(parser)
        parser.add_argument("tokens", nargs="*", help="Cask tokens to uninstall")
        parser.add_argument(
            "-f",
            "--force",
            action="store_true",
            help="Uninstall even if not installed and skip missing uninstall targets",
        )

    def run(self, argv: Namespace) -> int:
        unknown = [item for item in getattr(argv, "unknown_options", None) or [] if item.startswith("-")]
        extra_tokens = [item for item in getattr(argv, "unknown_options", None) or [] if not item.startswith("-")]
        try:
            request = UninstallRequest.build(
                [*(getattr(argv, "tokens", None) or []), *extra_tokens],
                force=bool(getattr(argv, "force", False)),
                unknown_options=unknown,
            )
        except CaskError as exc:
            self._say(str(exc))
            return 1

        config = self._config(argv)
        try:
            report = Uninstaller(config).run(request)
        except CaskError as exc:
            self._say(str(exc))
            return 1
        except Exception as exc:
            logger.debug("unexpected error while uninstalling", exc_info=True)
            self._say(f"unexpected failure: {exc}")
            return 1

        for outcome in report.outcomes:
            if outcome.error is not None:
                self._say(f"failed: {outcome.error}")
                continue
            self._say(f"removed {outcome.token} {outcome.version}")
            for failure in outcome.failures:
                self._say(f"forced past: {failure}")
        return 0 if report.ok else 1
