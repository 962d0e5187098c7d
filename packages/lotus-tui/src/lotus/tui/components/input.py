"""Input component - single-line text input with horizontal scrolling."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from lotus.tui.element import Element, box, hstack, text
from lotus.tui.keys import SEQ_CTRL_LEFT, SEQ_CTRL_RIGHT, SEQ_DELETE, SEQ_END, SEQ_HOME, SEQ_LEFT, SEQ_RIGHT, KeyEvent
from lotus.tui.utils import graphemes

if TYPE_CHECKING:
    from lotus.tui.context import Context

logger = logging.getLogger(__name__)

ValueCallback = Callable[["Context | None", str], None]

PROMPT = "> "
PLACEHOLDER_COLOR = "#808080"

_CTRL_K = 11
_CTRL_U = 21
_CTRL_W = 23


class Input:
    """Focusable single-line editor.

    ``value`` and ``cursor`` are code-point indices; cursor motion and
    deletion step over whole grapheme clusters. Only ``width`` cells of the
    value are shown, ``scroll`` being the index of the first one.

    Enter offers the value to the context's command registry first; if no
    command matched, ``on_submit`` is called and the value is cleared. Enter
    always bubbles (``handle_key`` returns ``False``) so that global
    handlers can react to it too.
    """

    def __init__(
        self,
        input_id: str = "",
        *,
        value: str = "",
        placeholder: str = "",
        width: int = 50,
        disabled: bool = False,
        on_change: ValueCallback | None = None,
        on_submit: ValueCallback | None = None,
    ) -> None:
        self.id = input_id
        self.value = value
        self.cursor = len(value)
        self.scroll = 0
        self.width = max(1, width)
        self.placeholder = placeholder
        self.disabled = disabled
        self.focused = False
        self.on_change = on_change
        self.on_submit = on_submit
        self._adjust_scroll()

    # -- Focusable ----------------------------------------------------------

    def is_focusable(self) -> bool:
        return not self.disabled

    def set_focus_state(self, focused: bool) -> None:
        self.focused = focused

    def cursor_offset(self) -> int:
        """Column of the cursor relative to the start of the prompt."""
        return len(PROMPT) + self.cursor - self.scroll

    # -- Stateful -----------------------------------------------------------

    def get_id(self) -> str:
        return self.id

    def save_state(self) -> dict[str, Any]:
        return {"value": self.value, "cursorPos": self.cursor, "scroll": self.scroll}

    def load_state(self, state: dict[str, Any]) -> None:
        """Restore saved fields, skipping any of the wrong type."""
        value = state.get("value")
        if isinstance(value, str):
            self.value = value
        cursor = state.get("cursorPos")
        if isinstance(cursor, (int, float)) and not isinstance(cursor, bool):
            self.cursor = int(cursor)
        scroll = state.get("scroll")
        if isinstance(scroll, (int, float)) and not isinstance(scroll, bool):
            self.scroll = int(scroll)
        self.cursor = max(0, min(self.cursor, len(self.value)))
        self.scroll = max(0, min(self.scroll, len(self.value)))
        self._adjust_scroll()

    # -- PropsUpdater -------------------------------------------------------

    def update_props(self, new_instance: Input) -> None:
        """Take configuration from a freshly built duplicate; keep the text."""
        self.placeholder = new_instance.placeholder
        self.width = new_instance.width
        self.disabled = new_instance.disabled
        self.on_change = new_instance.on_change
        self.on_submit = new_instance.on_submit
        self._adjust_scroll()

    # -- value access -------------------------------------------------------

    def set_value(self, value: str) -> None:
        self.value = value
        self.cursor = min(self.cursor, len(value))
        self._adjust_scroll()

    # -- keys ---------------------------------------------------------------

    def handle_key(self, event: KeyEvent, ctx: Context | None = None) -> bool:
        if self.disabled:
            return False
        old_value = self.value

        if event.is_enter():
            self._submit(ctx)
            return False

        if event.is_printable():
            chunk = event.char.replace("\r\n", "").replace("\r", "").replace("\n", "")
            self._insert(chunk)
        elif event.is_backspace():
            self._delete_backward()
        elif event.code == SEQ_DELETE:
            self._delete_forward()
        elif event.code == SEQ_LEFT:
            self.cursor -= self._grapheme_before()
        elif event.code == SEQ_RIGHT:
            self.cursor += self._grapheme_after()
        elif event.code == SEQ_HOME:
            self.cursor = 0
        elif event.code == SEQ_END:
            self.cursor = len(self.value)
        elif event.code == SEQ_CTRL_LEFT:
            self.cursor = self._word_start_before()
        elif event.code == SEQ_CTRL_RIGHT:
            self.cursor = self._word_end_after()
        elif event.key == _CTRL_U and not event.code and not event.char:
            self.value = self.value[self.cursor:]
            self.cursor = 0
        elif event.key == _CTRL_K and not event.code and not event.char:
            self.value = self.value[: self.cursor]
        elif event.key == _CTRL_W and not event.code and not event.char:
            start = self._word_start_before()
            self.value = self.value[:start] + self.value[self.cursor:]
            self.cursor = start
        else:
            return False

        self._adjust_scroll()
        self._emit_change(ctx, old_value)
        return True

    def _submit(self, ctx: Context | None) -> None:
        value = self.value
        commands = ctx.commands if ctx is not None else None
        if commands is not None and commands.execute(value, ctx):
            self._clear(ctx)
            return
        if self.on_submit is None:
            return
        self.on_submit(ctx, value)
        self._clear(ctx)

    def _clear(self, ctx: Context | None) -> None:
        old_value = self.value
        self.value = ""
        self.cursor = 0
        self.scroll = 0
        self._emit_change(ctx, old_value)
        if ctx is not None:
            ctx.rerender()

    def _emit_change(self, ctx: Context | None, old_value: str) -> None:
        if self.value != old_value and self.on_change is not None:
            self.on_change(ctx, self.value)

    # -- editing helpers ----------------------------------------------------

    def _insert(self, chunk: str) -> None:
        self.value = self.value[: self.cursor] + chunk + self.value[self.cursor:]
        self.cursor += len(chunk)

    def _delete_backward(self) -> None:
        size = self._grapheme_before()
        if size:
            self.value = self.value[: self.cursor - size] + self.value[self.cursor:]
            self.cursor -= size

    def _delete_forward(self) -> None:
        size = self._grapheme_after()
        if size:
            self.value = self.value[: self.cursor] + self.value[self.cursor + size:]

    def _grapheme_before(self) -> int:
        if self.cursor <= 0:
            return 0
        clusters = graphemes(self.value[: self.cursor])
        return len(clusters[-1]) if clusters else 1

    def _grapheme_after(self) -> int:
        if self.cursor >= len(self.value):
            return 0
        clusters = graphemes(self.value[self.cursor:])
        return len(clusters[0]) if clusters else 1

    def _word_start_before(self) -> int:
        pos = self.cursor
        while pos > 0 and self.value[pos - 1].isspace():
            pos -= 1
        while pos > 0 and not self.value[pos - 1].isspace():
            pos -= 1
        return pos

    def _word_end_after(self) -> int:
        pos = self.cursor
        end = len(self.value)
        while pos < end and self.value[pos].isspace():
            pos += 1
        while pos < end and not self.value[pos].isspace():
            pos += 1
        return pos

    def _adjust_scroll(self) -> None:
        self.cursor = max(0, min(self.cursor, len(self.value)))
        if self.cursor < self.scroll:
            self.scroll = self.cursor
        elif self.cursor >= self.scroll + self.width:
            self.scroll = self.cursor - self.width + 1
        self.scroll = max(0, self.scroll)

    # -- render -------------------------------------------------------------

    def render(self) -> Element:
        if not self.value and self.placeholder:
            body = self._render_placeholder()
        else:
            body = self._render_value()
        root = box(hstack(text(PROMPT), *body)).with_padding("0 1")
        if self.id:
            root.with_id(self.id)
        return root

    def _render_placeholder(self) -> list[Element]:
        if not self.focused:
            return [text(self.placeholder).with_color(PLACEHOLDER_COLOR)]
        first, rest = self.placeholder[0], self.placeholder[1:]
        return [
            text(first).with_style("reverse", "true"),
            text(rest).with_color(PLACEHOLDER_COLOR),
        ]

    def _render_value(self) -> list[Element]:
        visible = self.value[self.scroll: self.scroll + self.width]
        if not self.focused:
            return [text(visible)]
        at = self.cursor - self.scroll
        before = visible[:at]
        after = visible[at:]
        clusters = graphemes(after) if after else []
        under = clusters[0] if clusters else " "
        rest = after[len(under):] if clusters else ""
        parts = [text(before)] if before else []
        parts.append(text(under).with_style("reverse", "true"))
        if rest:
            parts.append(text(rest))
        return parts
