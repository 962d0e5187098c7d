"""StreamingText - text that grows while a background producer writes to it."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from lotus.tui.element import Element, box, text

if TYPE_CHECKING:
    from lotus.tui.context import Context


class StreamingText:
    """Accumulates chunks from any thread and renders them as one block.

    Producers call :meth:`append` (typically from a worker thread fed by a
    network stream); the lock guards ``_chunks`` and ``_done`` only. Each
    append asks the attached context for a new frame, which
    :meth:`lotus.tui.context.Context.rerender` makes safe off the loop
    thread. The box is marked ``overflow: auto`` so the scroll manager keeps
    it pinned to the newest line while the user is at the bottom.
    """

    def __init__(self, stream_id: str = "", ctx: Context | None = None, *, cursor: str = "▌") -> None:
        self.id = stream_id
        self.ctx = ctx
        self.cursor = cursor
        self._chunks: list[str] = []
        self._done = False
        self._lock = threading.Lock()

    def attach(self, ctx: Context) -> None:
        self.ctx = ctx

    def append(self, chunk: str) -> None:
        with self._lock:
            self._chunks.append(chunk)
        self._notify()

    def finish(self) -> None:
        with self._lock:
            self._done = True
        self._notify()

    def reset(self) -> None:
        with self._lock:
            self._chunks.clear()
            self._done = False
        self._notify()

    @property
    def content(self) -> str:
        with self._lock:
            return "".join(self._chunks)

    @property
    def done(self) -> bool:
        with self._lock:
            return self._done

    def _notify(self) -> None:
        if self.ctx is not None:
            self.ctx.rerender()

    def update_props(self, new_instance: StreamingText) -> None:
        if new_instance.ctx is not None:
            self.ctx = new_instance.ctx
        self.cursor = new_instance.cursor

    def get_id(self) -> str:
        return self.id

    def save_state(self) -> dict[str, Any]:
        with self._lock:
            return {"content": "".join(self._chunks), "done": self._done}

    def load_state(self, state: dict[str, Any]) -> None:
        content = state.get("content")
        done = state.get("done")
        with self._lock:
            if isinstance(content, str):
                self._chunks = [content]
            if isinstance(done, bool):
                self._done = done

    def render(self) -> Element:
        with self._lock:
            body = "".join(self._chunks)
            done = self._done
        if not done:
            body += self.cursor
        root = box(text(body)).with_overflow("auto").with_flex_grow(1)
        if self.id:
            root.with_id(self.id)
        return root
