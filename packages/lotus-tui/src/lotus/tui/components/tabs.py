"""Tabs component - a tab bar over the active tab's content."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from lotus.tui.element import Element, box, hstack, text, to_element
from lotus.tui.keys import SEQ_LEFT, SEQ_RIGHT, KeyEvent
from lotus.tui.utils import visible_width

if TYPE_CHECKING:
    from lotus.tui.context import Context

ACTIVE_COLOR = "#00ff00"
INACTIVE_COLOR = "#808080"
TAB_STYLES = ("line", "brackets", "pipes", "rounded")

# Ctrl+] arrives as GS
_KEY_NEXT_TAB = 29

TabChangeCallback = Callable[["Context | None", int], None]


@dataclass
class Tab:
    label: str
    content: Any = None
    disabled: bool = False


class Tabs:
    """Switches between tabs with Left/Right, Ctrl+] and the digits 1-9.

    A tab bar never takes focus itself: its keys reach it through the
    router's fall-through pass, so it keeps working while an input inside
    the active tab holds focus (which consumes digits and arrows first).
    """

    def __init__(
        self,
        tabs_id: str = "",
        tabs: list[Tab] | None = None,
        *,
        active: int = 0,
        style: str = "line",
        on_change: TabChangeCallback | None = None,
    ) -> None:
        if style not in TAB_STYLES:
            raise ValueError(f"unknown tab style {style!r}")
        self.id = tabs_id
        self.tabs: list[Tab] = list(tabs or [])
        self.active = active if 0 <= active < len(self.tabs) else 0
        self.style = style
        self.on_change = on_change

    def add_tab(self, label: str, content: Any = None, disabled: bool = False) -> Tab:
        tab = Tab(label, content, disabled)
        self.tabs.append(tab)
        return tab

    # -- navigation ---------------------------------------------------------

    def set_active(self, index: int, ctx: Context | None = None) -> bool:
        """Activate tab *index*. Returns ``False`` for an out-of-range or
        disabled tab."""
        if not 0 <= index < len(self.tabs) or self.tabs[index].disabled:
            return False
        if index != self.active:
            self.active = index
            if self.on_change is not None:
                self.on_change(ctx, index)
        return True

    def next(self, ctx: Context | None = None) -> bool:
        return self._step(1, ctx)

    def previous(self, ctx: Context | None = None) -> bool:
        return self._step(-1, ctx)

    def _step(self, direction: int, ctx: Context | None) -> bool:
        count = len(self.tabs)
        index = self.active
        for _ in range(count):
            index = (index + direction) % count
            if not self.tabs[index].disabled:
                return self.set_active(index, ctx)
        return False

    # -- KeyHandler ---------------------------------------------------------

    def handle_key(self, event: KeyEvent, ctx: Context | None = None) -> bool:
        if not self.tabs:
            return False
        if event.code == SEQ_LEFT:
            return self.previous(ctx)
        if event.code == SEQ_RIGHT:
            return self.next(ctx)
        if event.key == _KEY_NEXT_TAB and not event.code and not event.char:
            return self.next(ctx)
        if len(event.char) == 1 and "1" <= event.char <= "9" and not event.paste:
            return self.set_active(int(event.char) - 1, ctx)
        return False

    # -- Stateful -----------------------------------------------------------

    def get_id(self) -> str:
        return self.id

    def save_state(self) -> dict[str, Any]:
        return {"active": self.active}

    def load_state(self, state: dict[str, Any]) -> None:
        active = state.get("active")
        if isinstance(active, (int, float)) and not isinstance(active, bool):
            index = int(active)
            if 0 <= index < len(self.tabs):
                self.active = index

    # -- PropsUpdater -------------------------------------------------------

    def update_props(self, new_instance: Tabs) -> None:
        self.tabs = new_instance.tabs
        self.style = new_instance.style
        self.on_change = new_instance.on_change
        if self.active >= len(self.tabs):
            self.active = 0

    # -- render -------------------------------------------------------------

    def _label(self, index: int) -> str:
        label = self.tabs[index].label
        if self.style == "brackets":
            return f"[{label}]"
        if self.style == "rounded":
            return f"({label})"
        return f" {label} "

    def _content(self) -> Element | None:
        if not self.tabs or self.tabs[self.active].content is None:
            return None
        content = to_element(self.tabs[self.active].content)
        if self.id and content.is_component and not content.key:
            # keep each tab's widgets apart in the component cache
            content.with_key(f"{self.id}:{self.active}")
        return content

    def render(self) -> Element:
        separator = "│" if self.style == "pipes" else " "
        labels: list[Element] = []
        underline: list[str] = []
        for i in range(len(self.tabs)):
            if i:
                labels.append(text(separator))
                underline.append(" ")
            label = self._label(i)
            width = visible_width(label)
            node = text(label)
            if i == self.active:
                node.with_color(ACTIVE_COLOR).with_style("font-weight", "bold")
                underline.append("─" * width)
            else:
                node.with_color(INACTIVE_COLOR)
                if self.tabs[i].disabled:
                    node.with_style("font-weight", "dim")
                underline.append(" " * width)
            labels.append(node)

        bar = hstack(*labels)
        rule = text("".join(underline)).with_color(ACTIVE_COLOR)
        body = box(self._content()).with_flex_grow(1)
        root = box(bar, rule, body)
        if self.id:
            root.with_id(self.id)
        return root
