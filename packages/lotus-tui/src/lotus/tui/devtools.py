"""In-app developer panel.

When dev mode is on, a :class:`DevToolsHandler` mirrors ``lotus`` log
records into a bounded list, and :func:`wrap_with_devtools` places a panel
showing them next to the application tree. Ctrl+T toggles the panel and
Ctrl+P moves it between the right, bottom and left edges.
"""

from __future__ import annotations

import collections
import logging
import threading
import time
from typing import Callable

from lotus.tui.element import Element, box, hstack, text

PANEL_ID = "devtools-panel"
LOG_ID = "devtools-log"
PANEL_BACKGROUND = "#1a1a1a"
POSITIONS = ("right", "bottom", "left")
MAX_RECORDS = 500


def format_record(record: logging.LogRecord) -> str:
    """``[HH:MM:SS.mmm] message`` for one record."""
    stamp = time.strftime("%H:%M:%S", time.localtime(record.created))
    millis = int(record.msecs)
    return f"[{stamp}.{millis:03d}] {record.getMessage()}"


class DevToolsHandler(logging.Handler):
    """Keeps the last *capacity* formatted records.

    ``emit`` may run on any thread; *on_record* is called after each append
    so the owner can schedule a redraw.
    """

    def __init__(
        self,
        capacity: int = MAX_RECORDS,
        on_record: Callable[[], None] | None = None,
        level: int = logging.DEBUG,
    ) -> None:
        super().__init__(level)
        self._lines: collections.deque[str] = collections.deque(maxlen=capacity)
        self._lines_lock = threading.Lock()
        self.on_record = on_record

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = format_record(record)
        except Exception:
            self.handleError(record)
            return
        with self._lines_lock:
            self._lines.append(line)
        if self.on_record is not None:
            self.on_record()

    def lines(self) -> list[str]:
        with self._lines_lock:
            return list(self._lines)

    def clear(self) -> None:
        with self._lines_lock:
            self._lines.clear()


class DevTools:
    """Panel state plus the handler feeding it."""

    def __init__(self, enabled: bool = False, position: str = "right", capacity: int = MAX_RECORDS) -> None:
        if position not in POSITIONS:
            raise ValueError(f"unknown devtools position {position!r}")
        self.enabled = enabled
        self.position = position
        self.handler = DevToolsHandler(capacity)
        self._logger: logging.Logger | None = None

    # -- logging ------------------------------------------------------------

    def attach(
        self,
        logger_name: str = "lotus",
        on_record: Callable[[], None] | None = None,
        level: int = logging.INFO,
    ) -> None:
        """Start mirroring records of *logger_name* at *level* and above."""
        self.detach()
        self.handler.on_record = on_record
        self.handler.setLevel(level)
        self._logger = logging.getLogger(logger_name)
        self._logger.addHandler(self.handler)
        if self._logger.getEffectiveLevel() > level:
            self._logger.setLevel(level)

    def detach(self) -> None:
        if self._logger is not None:
            self._logger.removeHandler(self.handler)
            self._logger = None
        self.handler.on_record = None

    def log(self, message: str) -> None:
        """Add a line that did not come from :mod:`logging`."""
        record = logging.LogRecord("lotus.devtools", logging.INFO, __file__, 0, message, None, None)
        self.handler.handle(record)

    # -- panel state --------------------------------------------------------

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        return self.enabled

    def cycle_position(self) -> str:
        """Advance right -> bottom -> left -> right. Ignored while hidden."""
        if self.enabled:
            index = POSITIONS.index(self.position)
            self.position = POSITIONS[(index + 1) % len(POSITIONS)]
        return self.position

    # -- rendering ----------------------------------------------------------

    def render(self) -> Element:
        lines = self.handler.lines()
        body = box(
            text("DevTools").with_style("font-weight", "bold"),
            text("\n".join(lines) if lines else "(no log records)"),
        )
        body.with_background(PANEL_BACKGROUND).with_overflow("auto").with_flex_grow(1).with_id(LOG_ID)
        panel = box(body).with_border("rounded").with_id(PANEL_ID)
        return panel


def wrap_with_devtools(app: Element, devtools: DevTools) -> Element:
    """Lay the app tree and the panel side by side (or stacked).

    Returns *app* unchanged while the panel is disabled.
    """
    if not devtools.enabled:
        return app
    panel = devtools.render()
    if devtools.position == "bottom":
        return box(
            box(app).with_flex_grow(7),
            panel.with_flex_grow(3),
        ).with_style("height", "100%")
    if devtools.position == "left":
        return hstack(
            panel.with_flex_grow(2),
            box(app).with_flex_grow(3),
        ).with_style("height", "100%")
    return hstack(
        box(app).with_flex_grow(3),
        panel.with_flex_grow(2),
    ).with_style("height", "100%")
