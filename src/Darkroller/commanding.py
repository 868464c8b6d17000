# src/Darkroller/commanding.py
from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel

if TYPE_CHECKING:
    from Darkroller.config import Settings
    from Darkroller.rules.engine import Ruleset


class Responder(Protocol):
    async def send(self, content: str, *, ephemeral: bool = False) -> None: ...


@dataclass
class Invocation:
    """What a command handler sees, whether it came from Discord or the CLI."""

    name: str
    subcommand: str | None
    options: dict[str, Any]
    user_id: str
    channel_id: str | None
    guild_id: str | None
    responder: Responder
    # Handlers load settings and build a ruleset themselves when these are unset
    settings: Settings | None = None
    ruleset: Ruleset | None = None


class Option(BaseModel):
    """Base for command options; extend per command."""


@dataclass
class Command:
    name: str
    description: str
    option_model: type[Option]
    handler: Callable[[Invocation, Option], Awaitable[None]]
    subcommand: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return command_key(self.name, self.subcommand)


_REGISTRY: dict[str, Command] = {}


def command_key(name: str, subcommand: str | None = None) -> str:
    return name + (f":{subcommand}" if subcommand else "")


def slash_command(
    name: str,
    description: str,
    option_model: type[Option] = Option,
    subcommand: str | None = None,
    **metadata: Any,
):
    def wrap(func: Callable[[Invocation, Option], Awaitable[None]]):
        cmd = Command(name, description, option_model, func, subcommand, metadata)
        _REGISTRY[cmd.key] = cmd
        return func
    return wrap


def all_commands() -> dict[str, Command]:
    return dict(_REGISTRY)


def find_command(name: str, subcommand: str | None) -> Command | None:
    cmd = _REGISTRY.get(command_key(name, subcommand))
    if cmd is not None:
        return cmd
    # A top-level command also answers unknown subcommands
    return _REGISTRY.get(name)
