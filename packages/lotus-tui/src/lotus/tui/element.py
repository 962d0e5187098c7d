"""Element tree: the per-frame snapshot an application's render call returns.

Every frame builds a fresh tree of :class:`Element` nodes. A node is a
container, a text leaf, or a component wrapper. A component wrapper carries
the component instance in ``component`` and holds exactly one child: the
element that component rendered. The reconciler and the focus manager are the
only code that rewrite a tree after it was built (they swap a wrapper's
component and replace its child).
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)

ERROR_COLOR = "#ff0000"


class ElementKind(str, enum.Enum):
    CONTAINER = "container"
    TEXT = "text"
    COMPONENT = "component"


@dataclass(eq=False)
class Element:
    """One node of a rendered UI tree."""

    kind: ElementKind
    styles: dict[str, str] = field(default_factory=dict)
    children: list[Element] = field(default_factory=list)
    text: str = ""
    component: Any = None
    id: str = ""
    classes: list[str] = field(default_factory=list)
    key: str = ""

    # -- fluent setters -----------------------------------------------------

    def with_style(self, name: str, value: str | int) -> Element:
        self.styles[name] = str(value)
        return self

    def with_styles(self, styles: dict[str, str | int]) -> Element:
        for name, value in styles.items():
            self.styles[name] = str(value)
        return self

    def with_id(self, element_id: str) -> Element:
        self.id = element_id
        return self

    def with_key(self, key: str) -> Element:
        """Give this node a stable identity independent of its position."""
        self.key = key
        return self

    def with_class(self, *classes: str) -> Element:
        self.classes.extend(classes)
        return self

    def with_flex_grow(self, grow: int) -> Element:
        return self.with_style("flex-grow", grow)

    def with_overflow(self, overflow: str) -> Element:
        return self.with_style("overflow", overflow)

    def with_border(self, border_style: str = "single") -> Element:
        return self.with_style("border", border_style)

    def with_padding(self, padding: str | int) -> Element:
        return self.with_style("padding", padding)

    def with_color(self, color: str) -> Element:
        return self.with_style("color", color)

    def with_background(self, color: str) -> Element:
        return self.with_style("background-color", color)

    # -- queries ------------------------------------------------------------

    @property
    def is_component(self) -> bool:
        return self.kind is ElementKind.COMPONENT and self.component is not None

    def walk(self, path: str = "0") -> Iterator[tuple[str, Element]]:
        """Yield ``(path, node)`` pairs in pre-order.

        Paths are dot-separated child indices from the root, e.g. ``"0.2.1"``.
        """
        stack: list[tuple[str, Element]] = [(path, self)]
        while stack:
            node_path, node = stack.pop()
            yield node_path, node
            for i in range(len(node.children) - 1, -1, -1):
                stack.append((f"{node_path}.{i}", node.children[i]))

    def find_by_id(self, element_id: str) -> Element | None:
        for _, node in self.walk():
            if node.id == element_id:
                return node
        return None

    def plain_text(self) -> str:
        """Concatenated text of every TEXT leaf (handy in tests and logs)."""
        return "".join(node.text for _, node in self.walk() if node.kind is ElementKind.TEXT)

    def clone(self) -> Element:
        """Copy the node structure. Component instances are shared, not copied."""
        return Element(
            kind=self.kind,
            styles=dict(self.styles),
            children=[child.clone() for child in self.children],
            text=self.text,
            component=self.component,
            id=self.id,
            classes=list(self.classes),
            key=self.key,
        )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def text(content: str) -> Element:
    return Element(kind=ElementKind.TEXT, text=content)


def error_text(message: str) -> Element:
    """Visible placeholder substituted for a subtree that failed to build."""
    return text(f"[error] {message}").with_color(ERROR_COLOR)


def box(*children: Any) -> Element:
    """Column container (``display: flex; flex-direction: column``)."""
    return Element(
        kind=ElementKind.CONTAINER,
        styles={"display": "flex", "flex-direction": "column"},
        children=_to_elements(children),
    )


def vstack(*children: Any) -> Element:
    return box(*children)


def hstack(*children: Any) -> Element:
    return Element(
        kind=ElementKind.CONTAINER,
        styles={"display": "flex", "flex-direction": "row"},
        children=_to_elements(children),
    )


def is_component(value: object) -> bool:
    """Anything that is not an Element but can render itself is a component."""
    return not isinstance(value, (Element, str)) and callable(getattr(value, "render", None))


def mount(component: Any) -> Element:
    """Wrap *component* in a COMPONENT node holding its rendered output."""
    return Element(
        kind=ElementKind.COMPONENT,
        component=component,
        children=[render_component(component)],
    )


def render_component(component: Any) -> Element:
    """Call ``component.render()`` and normalise the result to an Element.

    Exceptions are isolated here: the failing subtree becomes an
    :func:`error_text` node and the rest of the frame is unaffected.
    """
    try:
        rendered = component.render()
    except Exception as exc:
        logger.exception("render failed for %s", type(component).__name__)
        return error_text(f"{type(component).__name__}: {exc}")
    if rendered is None:
        return box()
    return to_element(rendered)


def to_element(value: Any) -> Element:
    """Convert a string, Element or component into an Element."""
    if isinstance(value, Element):
        return value
    if isinstance(value, str):
        return text(value)
    if is_component(value):
        return mount(value)
    if isinstance(value, (list, tuple)):
        return vstack(*value)
    logger.warning("cannot convert %r to an element", value)
    return error_text(f"unsupported element {type(value).__name__}")


def _to_elements(children: Iterable[Any]) -> list[Element]:
    result: list[Element] = []
    for child in children:
        if child is None:
            continue
        if isinstance(child, (list, tuple)):
            result.extend(_to_elements(child))
        else:
            result.append(to_element(child))
    return result
