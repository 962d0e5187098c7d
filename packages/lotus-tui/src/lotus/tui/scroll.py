"""Per-element scroll offsets.

The layout pass reports content and viewport sizes for every scrollable
region; arrow keys and application code move the offsets. Offsets are
clamped to ``[0, content - viewport]`` on every mutation, and a region that
was scrolled to the bottom stays there when its content grows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class ScrollState:
    offset_x: int = 0
    offset_y: int = 0
    content_w: int = 0
    content_h: int = 0
    viewport_w: int = 0
    viewport_h: int = 0

    @property
    def max_x(self) -> int:
        return max(0, self.content_w - self.viewport_w)

    @property
    def max_y(self) -> int:
        return max(0, self.content_h - self.viewport_h)

    def clamp(self) -> None:
        self.offset_x = max(0, min(self.offset_x, self.max_x))
        self.offset_y = max(0, min(self.offset_y, self.max_y))

    def at_bottom(self) -> bool:
        return self.offset_y >= self.max_y


class ScrollManager:
    """Scroll state keyed by element ID."""

    def __init__(self) -> None:
        self._states: dict[str, ScrollState] = {}

    def state(self, element_id: str) -> ScrollState | None:
        return self._states.get(element_id)

    def get_offset(self, element_id: str) -> tuple[int, int]:
        """Return ``(x, y)``; unknown regions are at ``(0, 0)``."""
        state = self._states.get(element_id)
        if state is None:
            return 0, 0
        return state.offset_x, state.offset_y

    def set_offset(self, element_id: str, x: int, y: int) -> None:
        state = self._states.setdefault(element_id, ScrollState())
        state.offset_x = x
        state.offset_y = y
        state.clamp()

    def update_dimensions(
        self,
        element_id: str,
        content_w: int,
        content_h: int,
        viewport_w: int,
        viewport_h: int,
    ) -> None:
        """Record the sizes measured by the last layout pass.

        A region seen for the first time starts at the bottom. A region that
        was at the bottom before the update follows the tail.
        """
        state = self._states.get(element_id)
        first_report = state is None or state.content_h == 0
        if state is None:
            state = self._states[element_id] = ScrollState()

        was_at_bottom = state.content_h > 0 and state.offset_y >= state.content_h - viewport_h

        state.content_w = max(0, content_w)
        state.content_h = max(0, content_h)
        state.viewport_w = max(0, viewport_w)
        state.viewport_h = max(0, viewport_h)

        if first_report or was_at_bottom:
            state.offset_y = state.max_y
        state.clamp()

    def scroll_by(self, element_id: str, dx: int, dy: int) -> bool:
        """Move the offset by ``(dx, dy)``; return ``True`` if it changed.

        Regions without reported dimensions never scroll.
        """
        state = self._states.get(element_id)
        if state is None:
            return False
        old = (state.offset_x, state.offset_y)
        state.offset_x += dx
        state.offset_y += dy
        state.clamp()
        changed = (state.offset_x, state.offset_y) != old
        if changed:
            logger.debug("scrolled %s to %d,%d", element_id, state.offset_x, state.offset_y)
        return changed

    def scroll_up(self, element_id: str, lines: int = 1) -> bool:
        return self.scroll_by(element_id, 0, -lines)

    def scroll_down(self, element_id: str, lines: int = 1) -> bool:
        return self.scroll_by(element_id, 0, lines)

    def scroll_to_bottom(self, element_id: str) -> None:
        state = self._states.get(element_id)
        if state is not None:
            state.offset_y = state.max_y

    def forget(self, element_id: str) -> None:
        self._states.pop(element_id, None)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._states
