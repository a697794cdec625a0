"""Builtin commands shipped with the caskroom engine."""

from .install import InstallCommand
from .list import ListCommand
from .uninstall import UninstallCommand

__all__ = ["InstallCommand", "ListCommand", "UninstallCommand"]
