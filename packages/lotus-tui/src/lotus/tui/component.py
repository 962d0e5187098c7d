"""Component protocols and capability detection.

A component is any object with a ``render()`` method returning an Element (or
a string, or another component). Optional behaviour is opted into by
implementing one of the protocols below. The runtime never probes for these
methods ad hoc: :func:`capabilities` resolves them once per concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from lotus.tui.context import Context
    from lotus.tui.element import Element
    from lotus.tui.keys import KeyEvent


@runtime_checkable
class Component(Protocol):
    def render(self) -> Element | str: ...


@runtime_checkable
class KeyHandler(Protocol):
    """Receives key events. Returns ``True`` when the event was consumed."""

    def handle_key(self, event: KeyEvent, ctx: Context | None = None) -> bool: ...


@runtime_checkable
class Focusable(KeyHandler, Protocol):
    """A component that can hold keyboard focus."""

    def is_focusable(self) -> bool:
        """``False`` excludes the component from the focus cycle right now
        (e.g. a disabled input)."""
        ...

    def cursor_offset(self) -> int: ...

    def set_focus_state(self, focused: bool) -> None: ...


@runtime_checkable
class Stateful(Protocol):
    """A component whose state survives a process restart."""

    def get_id(self) -> str: ...

    def save_state(self) -> dict[str, Any]: ...

    def load_state(self, state: dict[str, Any]) -> None: ...


@runtime_checkable
class PropsUpdater(Protocol):
    """A component that accepts fresh props from a discarded duplicate.

    ``update_props`` copies callbacks, labels and other configuration from
    *new_instance* while keeping internal state (value, cursor, scroll).
    """

    def update_props(self, new_instance: Any) -> None: ...


@runtime_checkable
class Modal(Protocol):
    def is_open(self) -> bool: ...

    def should_close_on_escape(self) -> bool: ...

    def close(self) -> None: ...


@dataclass(frozen=True)
class Capabilities:
    focusable: bool = False
    key_handler: bool = False
    stateful: bool = False
    props_updater: bool = False
    modal: bool = False
    has_id: bool = False


_capability_cache: dict[type, Capabilities] = {}


def capabilities(component: object) -> Capabilities:
    """Return the optional protocols *component*'s type implements."""
    cls = type(component)
    caps = _capability_cache.get(cls)
    if caps is None:
        caps = Capabilities(
            focusable=isinstance(component, Focusable),
            key_handler=isinstance(component, KeyHandler),
            stateful=isinstance(component, Stateful),
            props_updater=isinstance(component, PropsUpdater),
            modal=isinstance(component, Modal),
            has_id=callable(getattr(cls, "get_id", None)),
        )
        _capability_cache[cls] = caps
    return caps


def component_id(component: object) -> str:
    """Stable author-supplied ID of *component*, or ``""``."""
    if component is None or not capabilities(component).has_id:
        return ""
    return component.get_id() or ""  # type: ignore[attr-defined]
