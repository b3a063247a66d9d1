"""Named commands and the table that dispatches them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


class UnknownCommandError(LookupError):
    """Raised when no handler is registered under a command's name."""


@dataclass
class Command:
    """A command name and its arguments."""

    name: str = ""
    args: list[str] = field(default_factory=list)


Handler = Callable[[Any, Command], Any]


class Commands:
    """A registry of handlers keyed by command name."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, name, handler) -> None:
        self._handlers[name] = handler

    def run(self, state, cmd):
        """Call the handler for cmd and return what it returns."""
        try:
            handler = self._handlers[cmd.name]
        except KeyError:
            raise UnknownCommandError(f"Unknown command: {cmd.name}") from None
        return handler(state, cmd)

    def names(self) -> list[str]:
        return list(self._handlers)