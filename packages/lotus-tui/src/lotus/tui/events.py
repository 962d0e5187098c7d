"""Keyboard event routing.

Each key event goes through one ordered chain and is consumed by at most one
handler:

1. Ctrl+C / Ctrl+D end the application (:meth:`EventRouter.handle_key`
   returns ``False``).
2. Escape closes the first open modal that allows it.
3. Global key bindings.
4. Tab / Shift+Tab move focus.
5. Arrow keys scroll the detected scroll region, but only when the offset
   actually moves; a clamped move falls through.
6. The focused component.
7. Components that are not focusable right now but handle keys anyway
   (e.g. a tab bar that reacts to Ctrl+] while a child input has focus).
8. Anything else is dropped.

A render is requested after any match in steps 2-7.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from lotus.tui.component import capabilities
from lotus.tui.keybindings import KeyBindingRegistry
from lotus.tui.keys import SEQ_DOWN, SEQ_LEFT, SEQ_RIGHT, SEQ_UP, KeyEvent

if TYPE_CHECKING:
    from lotus.tui.context import Context
    from lotus.tui.element import Element
    from lotus.tui.focus import FocusManager
    from lotus.tui.scroll import ScrollManager

logger = logging.getLogger(__name__)

_SCROLL_DELTAS: dict[str, tuple[int, int]] = {
    SEQ_UP: (0, -1),
    SEQ_DOWN: (0, 1),
    SEQ_LEFT: (-1, 0),
    SEQ_RIGHT: (1, 0),
}


class EventRouter:
    """Dispatches key events against the last rendered tree."""

    def __init__(
        self,
        focus: FocusManager,
        scroll: ScrollManager,
        keybindings: KeyBindingRegistry | None = None,
        *,
        request_render: Callable[[], None] | None = None,
        context: Context | None = None,
    ) -> None:
        self.focus = focus
        self.scroll = scroll
        self.keybindings = keybindings if keybindings is not None else KeyBindingRegistry()
        self.request_render = request_render
        self.context = context
        self.tree: Element | None = None
        self.scroll_region_id: str = ""
        self.render_requested = False
        self.last_consumer: str = ""

    def handle_key(self, event: KeyEvent) -> bool:
        """Route *event*. Returns ``False`` only when the application should exit."""
        self.render_requested = False
        self.last_consumer = ""
        if event.is_ctrl_c() or event.is_ctrl_d():
            self.last_consumer = "exit"
            return False

        consumer = self._route(event)
        if consumer:
            self.last_consumer = consumer
            self.render_requested = True
            if self.request_render is not None:
                self.request_render()
        else:
            logger.debug("dropped key %s", event.name)
        return True

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------

    def _route(self, event: KeyEvent) -> str:
        """Return the name of the layer that consumed *event*, or ``""``."""
        if event.is_escape() and self._close_modal():
            return "modal"

        if self.keybindings.dispatch(event, self.context):
            return "keybinding"

        if event.is_tab():
            self.focus.next()
            return "focus"
        if event.is_shift_tab():
            self.focus.previous()
            return "focus"

        if event.code in _SCROLL_DELTAS and self.scroll_region_id:
            dx, dy = _SCROLL_DELTAS[event.code]
            if self.scroll.scroll_by(self.scroll_region_id, dx, dy):
                return "scroll"

        focused = self.focus.focused()
        if focused is not None and self._deliver(focused, event):
            return "focused"

        if self._deliver_to_tree(event):
            return "tree"

        return ""

    def _close_modal(self) -> bool:
        for component in self._components():
            caps = capabilities(component)
            if not caps.modal:
                continue
            if component.is_open() and component.should_close_on_escape():
                component.close()
                return True
        return False

    def _deliver_to_tree(self, event: KeyEvent) -> bool:
        for component in self._components():
            caps = capabilities(component)
            if not caps.key_handler:
                continue
            if caps.focusable and component.is_focusable():
                continue
            if self._deliver(component, event):
                return True
        return False

    def _deliver(self, component: Any, event: KeyEvent) -> bool:
        try:
            return bool(component.handle_key(event, self.context))
        except Exception:
            logger.exception("%s.handle_key failed on %s", type(component).__name__, event.name)
            return True

    def _components(self) -> list[Any]:
        if self.tree is None:
            return []
        return [node.component for _, node in self.tree.walk() if node.is_component]
