"""Modal component - a titled dialog with a row of buttons."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from lotus.tui.element import Element, box, hstack, text, to_element
from lotus.tui.keys import SEQ_LEFT, SEQ_RIGHT, KeyEvent

if TYPE_CHECKING:
    from lotus.tui.context import Context

logger = logging.getLogger(__name__)

FOCUS_BACKGROUND = "#00ff00"
FOCUS_COLOR = "#000000"
DISABLED_COLOR = "#808080"


@dataclass
class ModalButton:
    label: str
    on_click: Callable[["Context | None"], None] | None = None
    disabled: bool = False


class Modal:
    """Dialog that holds focus while open.

    Opening it moves focus to it on the next frame, and focus stays there
    until it closes (see :class:`lotus.tui.focus.FocusManager`). Escape is
    handled by the router (see :meth:`should_close_on_escape`); Right moves
    to the next enabled button, Left to the previous one, and Enter and
    Space press the focused button.
    """

    def __init__(
        self,
        modal_id: str = "",
        *,
        title: str = "",
        content: Any = None,
        buttons: list[ModalButton] | None = None,
        open: bool = False,
        close_on_escape: bool = True,
        on_close: Callable[["Context | None"], None] | None = None,
    ) -> None:
        self.id = modal_id
        self.title = title
        self.content = content
        self.buttons: list[ModalButton] = list(buttons or [])
        self.open = open
        self.close_on_escape = close_on_escape
        self.on_close = on_close
        self.focused = False
        self.button_index = self._first_enabled()

    # -- open / close -------------------------------------------------------

    def show(self) -> None:
        self.open = True
        self.button_index = self._first_enabled()

    def close(self, ctx: Context | None = None) -> None:
        if not self.open:
            return
        self.open = False
        if self.on_close is not None:
            self.on_close(ctx)

    # -- Modal capability ---------------------------------------------------

    def is_open(self) -> bool:
        return self.open

    def should_close_on_escape(self) -> bool:
        return self.close_on_escape

    # -- Focusable ----------------------------------------------------------

    def is_focusable(self) -> bool:
        return self.open

    def set_focus_state(self, focused: bool) -> None:
        self.focused = focused

    def cursor_offset(self) -> int:
        return 0

    def handle_key(self, event: KeyEvent, ctx: Context | None = None) -> bool:
        if not self.open:
            return False
        if event.is_escape():
            if self.close_on_escape:
                self.close(ctx)
                return True
            return False
        if event.code == SEQ_RIGHT:
            return self._move(1)
        if event.code == SEQ_LEFT:
            return self._move(-1)
        if event.is_enter() or event.char == " ":
            return self.press(ctx)
        return False

    def press(self, ctx: Context | None = None) -> bool:
        """Click the focused button. Returns ``False`` if there is none."""
        if not 0 <= self.button_index < len(self.buttons):
            return False
        button = self.buttons[self.button_index]
        if button.disabled:
            return False
        if button.on_click is not None:
            button.on_click(ctx)
        return True

    def _move(self, direction: int) -> bool:
        count = len(self.buttons)
        index = self.button_index
        for _ in range(count):
            index = (index + direction) % count
            if not self.buttons[index].disabled:
                self.button_index = index
                return True
        return False

    def _first_enabled(self) -> int:
        for i, button in enumerate(self.buttons):
            if not button.disabled:
                return i
        return -1

    # -- Stateful -----------------------------------------------------------

    def get_id(self) -> str:
        return self.id

    def save_state(self) -> dict[str, Any]:
        return {"open": self.open, "button": self.button_index}

    def load_state(self, state: dict[str, Any]) -> None:
        is_open = state.get("open")
        if isinstance(is_open, bool):
            self.open = is_open
        button = state.get("button")
        if isinstance(button, (int, float)) and not isinstance(button, bool):
            if 0 <= int(button) < len(self.buttons):
                self.button_index = int(button)

    # -- PropsUpdater -------------------------------------------------------

    def update_props(self, new_instance: Modal) -> None:
        self.title = new_instance.title
        self.content = new_instance.content
        self.buttons = new_instance.buttons
        self.close_on_escape = new_instance.close_on_escape
        self.on_close = new_instance.on_close
        if not 0 <= self.button_index < len(self.buttons):
            self.button_index = self._first_enabled()

    # -- render -------------------------------------------------------------

    def render(self) -> Element | None:
        if not self.open:
            return None
        parts: list[Element] = []
        if self.title:
            parts.append(text(self.title).with_style("font-weight", "bold"))
        parts.append(box(to_element(self.content) if self.content is not None else None).with_flex_grow(1))
        if self.buttons:
            parts.append(hstack(*[self._render_button(i) for i in range(len(self.buttons))]).with_style("gap", 1))
        root = box(*parts).with_border("double").with_padding("0 1")
        if self.id:
            root.with_id(self.id)
        return root

    def _render_button(self, index: int) -> Element:
        button = self.buttons[index]
        node = box(text(button.label)).with_border().with_padding("0 1")
        if button.disabled:
            node.with_color(DISABLED_COLOR)
        elif index == self.button_index and self.focused:
            node.with_color(FOCUS_COLOR).with_background(FOCUS_BACKGROUND)
        return node
