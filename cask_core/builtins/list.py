"""Builtin list command showing installed casks."""

from __future__ import annotations

import json
from argparse import ArgumentParser, Namespace

from cask_core.api import caskcommand
from cask_core.caskroom import CaskroomLayout
from cask_core.versions import VersionStore

from .commands import _WorkspaceAwareCommand


@caskcommand(name="list", group="cask")
class ListCommand(_WorkspaceAwareCommand):
    """List installed casks and their versions."""

    prefix = "cask:list"

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        cls.add_workspace_argument(parser)
        parser.add_argument("tokens", nargs="*", help="Only show these casks")
        parser.add_argument("--format", choices=["text", "json"], default="text")

    def run(self, argv: Namespace) -> int:
        if self._reject_unknown(argv):
            return 1
        layout = CaskroomLayout(self._config(argv).caskroom)
        versions = VersionStore(layout)
        tokens = list(getattr(argv, "tokens", None) or []) or layout.tokens()

        entries = []
        missing = []
        for token in tokens:
            try:
                installed = versions.installed_versions(token)
            except ValueError:
                installed = []
            if installed:
                entries.append({"token": token, "versions": installed})
            else:
                missing.append(token)

        if str(getattr(argv, "format", "text")) == "json":
            print(json.dumps({"casks": entries, "not_installed": missing}, indent=2))
        else:
            if not entries and not missing:
                self._say("no casks installed")
            for entry in entries:
                print(f"{entry['token']} {' '.join(entry['versions'])}")
            for token in missing:
                self._say(f"{token} is not installed")
        explicit = bool(getattr(argv, "tokens", None))
        return 1 if explicit and missing else 0
