"""Argument dispatch for the ``cask`` command."""

from __future__ import annotations

import logging
from argparse import ArgumentParser
from pathlib import Path
from typing import Sequence

import cask_core.builtins  # noqa: F401  registers the builtin commands
from cask_core.api import CaskCommand, registered_commands

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="cask", description="Manage casks installed in a caskroom.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name, spec in registered_commands().items():
        subparser = subparsers.add_parser(name, help=spec.help)
        spec.command_cls.configure(subparser)
    return parser


def main(argv: Sequence[str] | None = None, *, start_dir: Path | None = None) -> int:
    parser = build_parser()
    args, unknown = parser.parse_known_args(list(argv) if argv is not None else None)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)

    if not args.command:
        parser.print_help()
        return 1

    spec = registered_commands()[args.command]
    args.unknown_options = unknown
    args.start_dir = start_dir
    command: CaskCommand = spec.command_cls()
    return command.run(args)
