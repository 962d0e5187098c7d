"""Slash commands.

A :class:`CommandRegistry` maps names (and aliases) to handlers with the
canonical shape ``handler(ctx, args)``. Text typed into a focused
:class:`lotus.tui.components.Input` is offered to the registry before the
input's own submit callback sees it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from lotus.tui.context import Context

logger = logging.getLogger(__name__)

CommandHandler = Callable[["Context | None", "list[str]"], None]

DEFAULT_PREFIX = "/"


@dataclass
class Command:
    name: str
    description: str = ""
    handler: CommandHandler | None = None
    aliases: list[str] = field(default_factory=list)


class CommandRegistry:
    """Named commands plus a built-in ``help`` that lists them."""

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        if not prefix:
            raise ValueError("command prefix must not be empty")
        self.prefix = prefix
        self._commands: dict[str, Command] = {}
        self._display: Callable[[str], None] | None = None
        self.register(Command("help", "Show available commands", self._help))

    # -- registration ------------------------------------------------------

    def register(self, command: Command) -> Command:
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command
        return command

    def add(self, name: str, description: str, handler: CommandHandler, aliases: list[str] | None = None) -> Command:
        """Shorthand for ``register(Command(...))``."""
        return self.register(Command(name, description, handler, list(aliases or [])))

    def set_display_handler(self, display: Callable[[str], None] | None) -> None:
        """Where command output (e.g. ``/help``) goes, one line per call."""
        self._display = display

    @property
    def has_display_handler(self) -> bool:
        return self._display is not None

    def display(self, line: str) -> None:
        if self._display is not None:
            self._display(line)

    # -- lookup ------------------------------------------------------------

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def list_commands(self) -> list[Command]:
        """Registered commands in registration order, aliases collapsed."""
        seen: list[Command] = []
        for command in self._commands.values():
            if not any(command is s for s in seen):
                seen.append(command)
        return seen

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def help_text(self) -> list[str]:
        lines = ["", "Available commands:"]
        for command in self.list_commands():
            lines.append(f"  {self.prefix}{command.name} - {command.description}")
        return lines

    # -- execution ---------------------------------------------------------

    def parse(self, text: str) -> tuple[str, list[str]] | None:
        """Split ``"/name arg1 arg2"`` into ``("name", ["arg1", "arg2"])``.

        Returns ``None`` when *text* is not a command.
        """
        if not text.startswith(self.prefix):
            return None
        parts = text[len(self.prefix):].split()
        if not parts:
            return None
        return parts[0], parts[1:]

    def execute(self, text: str, ctx: Context | None = None) -> bool:
        """Run the command in *text*. Returns ``True`` if a command matched."""
        parsed = self.parse(text)
        if parsed is None:
            return False
        name, args = parsed
        command = self._commands.get(name)
        if command is None:
            logger.debug("unknown command %s%s", self.prefix, name)
            return False
        if command.handler is not None:
            try:
                command.handler(ctx, args)
            except Exception:
                logger.exception("command %s%s failed", self.prefix, name)
                self.display(f"Command {self.prefix}{name} failed")
        return True

    def _help(self, ctx: Context | None, args: list[str]) -> None:
        for line in self.help_text():
            self.display(line)
