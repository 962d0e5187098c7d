"""Terminal driver.

:class:`Terminal` is the small surface the runtime needs from a terminal.
:class:`ProcessTerminal` drives the real one through the process's stdin and
stdout descriptors: raw mode via :mod:`tty`/:mod:`termios`, bracketed paste,
the alternate screen and SIGWINCH resize notifications.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from lotus.tui.errors import TerminalError

logger = logging.getLogger(__name__)

PASTE_MODE_ON = "\x1b[?2004h"
PASTE_MODE_OFF = "\x1b[?2004l"
ALT_SCREEN_ON = "\x1b[?1049h"
ALT_SCREEN_OFF = "\x1b[?1049l"
CURSOR_HIDDEN = "\x1b[?25l"
CURSOR_SHOWN = "\x1b[?25h"
ERASE_SCREEN = "\x1b[2J\x1b[H"

FALLBACK_SIZE = (80, 24)
READ_CHUNK = 4096


class Terminal(Protocol):
    """What :class:`lotus.tui.app.App` needs from a terminal."""

    columns: int
    rows: int

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_screen(self) -> None: ...

    def enter_alt_screen(self) -> None: ...

    def leave_alt_screen(self) -> None: ...


class ProcessTerminal:
    """Terminal backed by the controlling TTY of this process.

    Construction fails with :class:`TerminalError` when stdin or stdout is
    not a terminal, so a piped invocation errors out before raw mode is
    attempted. :meth:`start` must run on the thread that owns the event loop.
    """

    def __init__(self) -> None:
        if not (sys.stdin.isatty() and sys.stdout.isatty()):
            raise TerminalError("stdin and stdout must be attached to a terminal")
        self._in_fd = sys.stdin.fileno()
        self._out_fd = sys.stdout.fileno()
        self._saved_mode: list | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._on_input: Callable[[str], None] | None = None
        self._alt_screen = False

    @property
    def columns(self) -> int:
        return self._size()[0]

    @property
    def rows(self) -> int:
        return self._size()[1]

    def _size(self) -> tuple[int, int]:
        try:
            size = os.get_terminal_size(self._out_fd)
        except OSError:
            return FALLBACK_SIZE
        return size.columns, size.lines

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None:
        try:
            self._saved_mode = termios.tcgetattr(self._in_fd)
            tty.setraw(self._in_fd)
        except termios.error as exc:
            raise TerminalError(f"cannot enter raw mode: {exc}") from exc

        self._on_input = on_input
        self._decoder.reset()
        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(self._in_fd, self._read_stdin)
        self._loop.add_signal_handler(signal.SIGWINCH, on_resize)
        self.write(PASTE_MODE_ON)
        logger.debug("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Undo everything :meth:`start` and :meth:`enter_alt_screen` changed."""
        self.write(PASTE_MODE_OFF)
        if self._alt_screen:
            self.leave_alt_screen()
        if self._loop is not None:
            self._loop.remove_reader(self._in_fd)
            self._loop.remove_signal_handler(signal.SIGWINCH)
            self._loop = None
        if self._saved_mode is not None:
            termios.tcsetattr(self._in_fd, termios.TCSADRAIN, self._saved_mode)
            self._saved_mode = None
        self._on_input = None

    def write(self, data: str) -> None:
        payload = data.encode("utf-8")
        try:
            while payload:
                written = os.write(self._out_fd, payload)
                payload = payload[written:]
        except OSError:
            logger.debug("write to stdout failed", exc_info=True)

    def hide_cursor(self) -> None:
        self.write(CURSOR_HIDDEN)

    def show_cursor(self) -> None:
        self.write(CURSOR_SHOWN)

    def clear_screen(self) -> None:
        self.write(ERASE_SCREEN)

    def enter_alt_screen(self) -> None:
        self.write(ALT_SCREEN_ON)
        self._alt_screen = True

    def leave_alt_screen(self) -> None:
        self.write(ALT_SCREEN_OFF)
        self._alt_screen = False

    def _read_stdin(self) -> None:
        try:
            raw = os.read(self._in_fd, READ_CHUNK)
        except OSError:
            logger.exception("reading stdin failed")
            return
        # A multi-byte character may straddle two reads.
        data = self._decoder.decode(raw)
        if data and self._on_input is not None:
            self._on_input(data)
