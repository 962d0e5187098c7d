"""Keyboard focus that stays put while the focusable set is rebuilt.

The focusable list is recomputed from scratch every frame. Before the old
list is thrown away the focus manager remembers *who* had focus (its
``get_id()``, when it has one) and *where* (its index); after the new tree
has been reconciled it restores focus by ID, then by index, then falls back
to the first focusable. An open modal overrides all three: it takes focus
and keeps it until it closes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from lotus.tui.component import capabilities, component_id
from lotus.tui.element import Element, render_component
from lotus.tui.reconciler import Reconciler

logger = logging.getLogger(__name__)


@dataclass
class _FocusEntry:
    path: str
    node: Element
    component: Any


class FocusManager:
    """Tracks the single focused component of a mounted tree."""

    def __init__(self, reconciler: Reconciler | None = None) -> None:
        self.reconciler = reconciler if reconciler is not None else Reconciler()
        self._focusables: list[_FocusEntry] = []
        self._tree: Element | None = None
        self._last_focused: Any | None = None
        self.focus_index: int = -1
        self.preferred_id: str = ""
        self.preferred_index: int = -1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def focusables(self) -> list[Any]:
        return [entry.component for entry in self._focusables]

    def focused(self) -> Any | None:
        if 0 <= self.focus_index < len(self._focusables):
            return self._focusables[self.focus_index].component
        return None

    def focused_node(self) -> Element | None:
        if 0 <= self.focus_index < len(self._focusables):
            return self._focusables[self.focus_index].node
        return None

    def cursor_offset(self) -> int:
        focused = self.focused()
        if focused is None:
            return 0
        return focused.cursor_offset()

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def rebuild(self, tree: Element) -> Element:
        """Reconcile *tree*, recollect focusables and restore focus.

        Returns *tree*, rewritten in place.
        """
        current = self.focused()
        self._last_focused = current
        self.preferred_id = component_id(current)
        self.preferred_index = self.focus_index

        self.reconciler.reconcile(tree)
        self._tree = tree
        self._focusables = self._collect(tree)
        self.focus_index = self._resolve_index()
        self._apply_focus()
        return tree

    @staticmethod
    def _collect(tree: Element) -> list[_FocusEntry]:
        found: list[_FocusEntry] = []
        for path, node in tree.walk():
            if not node.is_component:
                continue
            component = node.component
            if capabilities(component).focusable and component.is_focusable():
                found.append(_FocusEntry(path, node, component))
        return found

    def _resolve_index(self) -> int:
        if not self._focusables:
            return -1
        modal = self._open_modal_index()
        if modal >= 0:
            return modal
        if self.preferred_id:
            for i, entry in enumerate(self._focusables):
                if component_id(entry.component) == self.preferred_id:
                    return i
        if 0 <= self.preferred_index < len(self._focusables):
            return self.preferred_index
        return 0

    def _open_modal_index(self) -> int:
        """Index of the open modal that should hold focus, else -1.

        A focused open modal keeps focus; otherwise the first open one
        takes it.
        """
        first = -1
        for i, entry in enumerate(self._focusables):
            component = entry.component
            if not (capabilities(component).modal and component.is_open()):
                continue
            if component is self._last_focused:
                return i
            if first < 0:
                first = i
        return first

    def _apply_focus(self) -> None:
        """Push focus state to every focusable, then re-render each one so
        focus-dependent visuals (cursor, highlight) match the new state."""
        for i, entry in enumerate(self._focusables):
            entry.component.set_focus_state(i == self.focus_index)
        rendered: list[str] = []
        for entry in self._focusables:
            # Already re-rendered as part of an enclosing focusable's output.
            if any(entry.path.startswith(outer + ".") for outer in rendered):
                continue
            output = render_component(entry.component)
            entry.node.children = [output]
            self.reconciler.reconcile_subtree(output, entry.path + ".0")
            rendered.append(entry.path)
        if len(rendered) < len(self._focusables) and self._tree is not None:
            self._focusables = self._collect(self._tree)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next(self) -> None:
        """Move focus to the next focusable, wrapping around (Tab)."""
        if not self._focusables:
            return
        self.focus_index = (self.focus_index + 1) % len(self._focusables)
        self._apply_focus()

    def previous(self) -> None:
        """Move focus to the previous focusable, wrapping around (Shift+Tab)."""
        if not self._focusables:
            return
        self.focus_index = (self.focus_index - 1) % len(self._focusables)
        self._apply_focus()

    def focus_id(self, target_id: str) -> bool:
        """Focus the focusable whose ``get_id()`` is *target_id*."""
        for i, entry in enumerate(self._focusables):
            if target_id and component_id(entry.component) == target_id:
                self.focus_index = i
                self._apply_focus()
                return True
        logger.debug("focus_id(%r): no such focusable", target_id)
        return False
