"""Command registration used by the ``cask`` CLI."""

from __future__ import annotations

from argparse import ArgumentParser, Namespace
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar


class CaskCommand(Protocol):
    @classmethod
    def configure(cls, parser: ArgumentParser) -> None: ...

    def run(self, argv: Namespace) -> int: ...


@dataclass(frozen=True)
class CommandSpec:
    name: str
    group: str
    command_cls: type
    help: str | None = None


_REGISTRY: dict[str, CommandSpec] = {}

CommandT = TypeVar("CommandT", bound=type)


def caskcommand(*, name: str, group: str = "cask") -> Callable[[CommandT], CommandT]:
    def decorator(command_cls: CommandT) -> CommandT:
        if name in _REGISTRY and _REGISTRY[name].command_cls is not command_cls:
            raise ValueError(f"command '{name}' is already registered")
        doc = (command_cls.__doc__ or "").strip().splitlines()
        _REGISTRY[name] = CommandSpec(name=name, group=group, command_cls=command_cls, help=doc[0] if doc else None)
        return command_cls

    return decorator


def registered_commands() -> dict[str, CommandSpec]:
    return dict(sorted(_REGISTRY.items()))
