"""Builtin install command for casks available in local taps."""

from __future__ import annotations

import logging
from argparse import ArgumentParser, Namespace

from cask_core.api import caskcommand
from cask_core.errors import CaskError
from cask_core.installer import Installer

from .commands import _WorkspaceAwareCommand

logger = logging.getLogger(__name__)


@caskcommand(name="install", group="cask")
class InstallCommand(_WorkspaceAwareCommand):
    """Stage and install casks from the configured taps."""

    prefix = "cask:install"

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        cls.add_workspace_argument(parser)
        parser.add_argument("tokens", nargs="+", help="Cask tokens to install")
        parser.add_argument("-f", "--force", action="store_true", help="Reinstall over an existing install")

    def run(self, argv: Namespace) -> int:
        if self._reject_unknown(argv):
            return 1
        installer = Installer(self._config(argv))
        code = 0
        for token in argv.tokens:
            try:
                record = installer.install_token(token, force=bool(getattr(argv, "force", False)))
            except CaskError as exc:
                self._say(f"failed: {exc}")
                code = 1
                continue
            self._say(f"installed {record.token} {record.version}")
        return code
