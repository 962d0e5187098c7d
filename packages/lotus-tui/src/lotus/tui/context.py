"""Handle passed to key handlers, commands and component callbacks."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from lotus.tui.commands import CommandRegistry
    from lotus.tui.focus import FocusManager
    from lotus.tui.keybindings import KeyBindingRegistry
    from lotus.tui.scroll import ScrollManager

logger = logging.getLogger(__name__)


class Context:
    """Gives callbacks access to the running application.

    :meth:`rerender` is the only method that may be called from another
    thread: it hops onto the loop with ``call_soon_threadsafe``. Everything
    else belongs to the loop thread.
    """

    def __init__(
        self,
        request_render: Callable[[], None],
        *,
        commands: CommandRegistry | None = None,
        keybindings: KeyBindingRegistry | None = None,
        scroll: ScrollManager | None = None,
        focus: FocusManager | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        on_exit: Callable[[], None] | None = None,
    ) -> None:
        self._request_render = request_render
        self.commands = commands
        self.keybindings = keybindings
        self.scroll = scroll
        self.focus = focus
        self.loop = loop
        self._on_exit = on_exit

    def rerender(self) -> None:
        """Ask for a new frame. Safe to call from any thread."""
        loop = self.loop
        if loop is not None and not loop.is_closed():
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is not loop:
                loop.call_soon_threadsafe(self._request_render)
                return
        self._request_render()

    update = rerender

    def exit(self) -> None:
        """Stop the application after the current event."""
        if self._on_exit is None:
            logger.debug("exit requested without a running application")
            return
        self._on_exit()
