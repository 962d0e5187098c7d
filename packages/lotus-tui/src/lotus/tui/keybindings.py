"""Application-wide keyboard shortcuts.

A :class:`KeyBindingRegistry` is created by the application and handed to
:class:`lotus.tui.app.App`; the event router consults it before focus
cycling, scrolling and the focused widget. Handlers use the canonical
callback shape ``handler(ctx, event) -> bool``. Wrap a handler that does not
need the context with :func:`ignore_context`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from lotus.tui.keys import KeyEvent, ctrl_code

if TYPE_CHECKING:
    from lotus.tui.context import Context

logger = logging.getLogger(__name__)

KeyCallback = Callable[["Context | None", KeyEvent], bool]


def ignore_context(fn: Callable[[Any], Any]) -> Callable[[Any, Any], Any]:
    """Adapt ``fn(payload)`` to the canonical ``handler(ctx, payload)``."""

    def adapter(ctx: Any, payload: Any) -> Any:
        return fn(payload)

    adapter.__name__ = getattr(fn, "__name__", "adapter")
    adapter.__doc__ = fn.__doc__
    return adapter


@dataclass
class KeyBinding:
    """One shortcut: a plain key, a ``Ctrl+<letter>`` or an escape code."""

    handler: KeyCallback
    key: str = ""
    ctrl: bool = False
    code: str = ""
    description: str = ""

    def matches(self, event: KeyEvent) -> bool:
        if self.code:
            return event.code == self.code
        if self.ctrl:
            return not event.code and not event.char and event.key == ctrl_code(self.key)
        return bool(self.key) and not event.code and event.char == self.key

    @property
    def label(self) -> str:
        if self.code:
            return KeyEvent.from_code(self.code).name
        if self.ctrl:
            return f"ctrl+{self.key.lower()}"
        return self.key


class KeyBindingRegistry:
    """Ordered list of global shortcuts; the first consuming handler wins."""

    def __init__(self) -> None:
        self._bindings: list[KeyBinding] = []

    def register_key(
        self,
        key: str,
        ctrl: bool,
        description: str,
        handler: KeyCallback,
    ) -> KeyBinding:
        """Bind a plain key (``ctrl=False``) or ``Ctrl+<key>``.

        ``register_key("o", True, "Open", handler)`` fires on Ctrl+O.
        """
        if ctrl:
            ctrl_code(key)  # validates the letter
        elif len(key) != 1:
            raise ValueError(f"expected a single character, got {key!r}")
        binding = KeyBinding(handler=handler, key=key, ctrl=ctrl, description=description)
        self._bindings.append(binding)
        return binding

    def register_code(self, code: str, description: str, handler: KeyCallback) -> KeyBinding:
        """Bind an escape sequence such as :data:`lotus.tui.keys.SEQ_F1`."""
        if not code:
            raise ValueError("escape code must not be empty")
        binding = KeyBinding(handler=handler, code=code, description=description)
        self._bindings.append(binding)
        return binding

    def unregister(self, binding: KeyBinding) -> None:
        if binding in self._bindings:
            self._bindings.remove(binding)

    def clear(self) -> None:
        self._bindings.clear()

    @property
    def bindings(self) -> list[KeyBinding]:
        return list(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def dispatch(self, event: KeyEvent, ctx: Context | None = None) -> bool:
        """Run matching handlers in registration order.

        Returns ``True`` as soon as one reports the event consumed. A handler
        that raises is logged and counts as having consumed the event.
        """
        for binding in self._bindings:
            if not binding.matches(event):
                continue
            try:
                if binding.handler(ctx, event):
                    return True
            except Exception:
                logger.exception("key binding %s (%s) failed", binding.label, binding.description)
                return True
        return False

    def help_lines(self) -> list[str]:
        return [f"  {b.label} - {b.description}" for b in self._bindings]
