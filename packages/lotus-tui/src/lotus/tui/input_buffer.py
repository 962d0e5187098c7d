"""Reassembly of key sequences split across terminal reads.

A read from stdin can end in the middle of an escape sequence or a
bracketed paste. :class:`InputBuffer` holds the unfinished tail until the
next read completes it, or until a short timeout says nothing more is
coming; a lone ESC flushed that way is the Escape key.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from lotus.tui.keys import KeyEvent, parse_sequence, split_complete, split_sequences

logger = logging.getLogger(__name__)

FLUSH_TIMEOUT = 0.01


class InputBuffer:
    def __init__(self, on_keys: Callable[[list[KeyEvent]], None], *, timeout: float = FLUSH_TIMEOUT) -> None:
        self._on_keys = on_keys
        self.timeout = timeout
        self._pending = ""
        self._timer: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, data: str) -> None:
        """Decode complete sequences from *data* and deliver them in one batch."""
        self._cancel_timer()
        sequences, self._pending = split_complete(self._pending + data)
        if sequences:
            self._on_keys([parse_sequence(seq) for seq in sequences])
        if not self._pending:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Nothing can arrive later without a loop reading stdin.
            self.flush()
            return
        self._timer = loop.call_later(self.timeout, self.flush)

    def flush(self) -> None:
        """Deliver whatever is pending as-is."""
        self._cancel_timer()
        if not self._pending:
            return
        data, self._pending = self._pending, ""
        logger.debug("flushing partial input %r", data)
        self._on_keys([parse_sequence(seq) for seq in split_sequences(data)])

    def clear(self) -> None:
        self._cancel_timer()
        self._pending = ""

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
