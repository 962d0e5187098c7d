"""Inline style resolution.

Turns each Element's ``styles`` map into a typed :class:`ComputedStyle`.
Text attributes (colour, weight, decoration, alignment) are inherited from
the parent; box properties (size, padding, border, flex, overflow) are not.
Unknown properties are ignored and malformed values fall back to defaults.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Iterator

from lotus.tui.element import Element, ElementKind

logger = logging.getLogger(__name__)

BORDER_STYLES = ("single", "rounded", "double", "heavy")


@dataclass
class ComputedStyle:
    display: str = "flex"
    flex_direction: str = "column"
    flex_grow: int = 0
    width: int | None = None
    height: int | None = None
    width_percent: int | None = None
    height_percent: int | None = None
    padding_top: int = 0
    padding_right: int = 0
    padding_bottom: int = 0
    padding_left: int = 0
    gap: int = 0
    border: bool = False
    border_style: str = "single"
    border_color: str = ""
    overflow: str = "visible"
    overflow_explicit: bool = False

    # inherited
    color: str = ""
    background: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    dim: bool = False
    reverse: bool = False
    text_align: str = "left"

    @property
    def border_width(self) -> int:
        return 1 if self.border else 0

    @property
    def hidden(self) -> bool:
        return self.display == "none"


_INHERITED = ("color", "bold", "italic", "underline", "strikethrough", "dim", "reverse", "text_align")


@dataclass
class StyledNode:
    element: Element
    style: ComputedStyle
    path: str
    children: list[StyledNode] = field(default_factory=list)

    @property
    def region_id(self) -> str:
        """Key used for scroll state: the element id, else its path."""
        return self.element.id or self.path

    def walk(self) -> Iterator[StyledNode]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def _parse_int(value: str, default: int | None = None) -> int | None:
    raw = value.strip().lower()
    for suffix in ("px", "ch"):
        if raw.endswith(suffix):
            raw = raw[: -len(suffix)]
    try:
        return int(float(raw))
    except ValueError:
        logger.debug("ignoring non-numeric style value %r", value)
        return default


def _parse_size(value: str) -> tuple[int | None, int | None]:
    """Return ``(cells, percent)``; one of them is ``None``."""
    raw = value.strip()
    if raw.endswith("%"):
        percent = _parse_int(raw[:-1])
        return None, percent
    if raw in ("auto", ""):
        return None, None
    return _parse_int(raw), None


def _parse_box(value: str) -> tuple[int, int, int, int]:
    """CSS shorthand: ``"1"``, ``"1 2"``, ``"1 2 3"`` or ``"1 2 3 4"``."""
    parts = [max(0, _parse_int(p, 0) or 0) for p in value.split()]
    if not parts:
        return 0, 0, 0, 0
    if len(parts) == 1:
        return parts[0], parts[0], parts[0], parts[0]
    if len(parts) == 2:
        return parts[0], parts[1], parts[0], parts[1]
    if len(parts) == 3:
        return parts[0], parts[1], parts[2], parts[1]
    return parts[0], parts[1], parts[2], parts[3]


def _apply_border(style: ComputedStyle, value: str) -> None:
    tokens = value.strip().lower().split()
    if not tokens or tokens == ["none"] or tokens == ["0"]:
        style.border = False
        return
    style.border = True
    for token in tokens:
        if token in BORDER_STYLES:
            style.border_style = token
        elif token.startswith("#"):
            style.border_color = token


def _apply(style: ComputedStyle, name: str, value: str) -> None:
    name = name.strip().lower()
    value = value.strip()
    lower = value.lower()

    if name == "display":
        style.display = lower
    elif name == "flex-direction":
        style.flex_direction = "row" if lower.startswith("row") else "column"
    elif name in ("flex-grow", "flex"):
        style.flex_grow = max(0, _parse_int(value.split()[0] if value else "0", 0) or 0)
    elif name == "width":
        style.width, style.width_percent = _parse_size(value)
    elif name == "height":
        style.height, style.height_percent = _parse_size(value)
    elif name == "padding":
        (style.padding_top, style.padding_right, style.padding_bottom, style.padding_left) = _parse_box(value)
    elif name in ("padding-top", "padding-right", "padding-bottom", "padding-left"):
        setattr(style, name.replace("-", "_"), max(0, _parse_int(value, 0) or 0))
    elif name == "gap":
        style.gap = max(0, _parse_int(value, 0) or 0)
    elif name == "border":
        _apply_border(style, value)
    elif name == "border-style":
        if lower in BORDER_STYLES:
            style.border = True
            style.border_style = lower
        elif lower == "none":
            style.border = False
    elif name == "border-color":
        style.border_color = lower
    elif name == "overflow":
        style.overflow = lower
        style.overflow_explicit = True
    elif name == "color":
        style.color = lower
    elif name in ("background-color", "background"):
        style.background = lower
    elif name == "font-weight":
        style.bold = lower == "bold"
        style.dim = lower in ("light", "lighter", "dim")
    elif name == "font-style":
        style.italic = lower == "italic"
    elif name == "text-decoration":
        style.underline = "underline" in lower
        style.strikethrough = "line-through" in lower or "strikethrough" in lower
    elif name == "reverse":
        style.reverse = lower in ("true", "1", "yes")
    elif name == "opacity":
        try:
            style.dim = float(value) < 1
        except ValueError:
            logger.debug("ignoring opacity %r", value)
    elif name == "text-align":
        style.text_align = lower if lower in ("left", "center", "right") else "left"


# ---------------------------------------------------------------------------
# Resolve
# ---------------------------------------------------------------------------


def compute_style(element: Element, parent: ComputedStyle | None = None) -> ComputedStyle:
    style = ComputedStyle()
    if parent is not None:
        for name in _INHERITED:
            setattr(style, name, getattr(parent, name))
    if element.kind is ElementKind.TEXT:
        style.display = "inline"
    for name, value in element.styles.items():
        _apply(style, name, value)
    return style


def resolve(element: Element, path: str = "0", parent: ComputedStyle | None = None) -> StyledNode:
    """Resolve *element* and its subtree into a :class:`StyledNode` tree.

    A component wrapper is transparent: it takes over its rendered child's
    sizing so that flex and fixed sizes behave as if the child stood in its
    place.
    """
    if element.kind is ElementKind.COMPONENT:
        children = [resolve(child, f"{path}.{i}", parent) for i, child in enumerate(element.children)]
        wrapper = ComputedStyle()
        if parent is not None:
            for name in _INHERITED:
                setattr(wrapper, name, getattr(parent, name))
        if children:
            inner = children[0].style
            wrapper = dataclasses.replace(
                wrapper,
                display=inner.display,
                flex_grow=inner.flex_grow,
                width=inner.width,
                height=inner.height,
                width_percent=inner.width_percent,
                height_percent=inner.height_percent,
            )
        return StyledNode(element, wrapper, path, children)

    style = compute_style(element, parent)
    children = [resolve(child, f"{path}.{i}", style) for i, child in enumerate(element.children)]
    return StyledNode(element, style, path, children)
