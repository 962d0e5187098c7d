"""Flexbox-style layout over a resolved style tree.

Supports column and row containers, fixed and percentage sizes,
``flex-grow``, ``gap``, ``padding``, single-cell borders and ``display:
none``. Text is word-wrapped to the width of its box. Children that do not
fit are laid out anyway and clipped by the painter; a container with
``overflow: auto`` keeps its children at their natural size and is scrolled
through the scroll manager instead of shrinking them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from lotus.tui.element import Element, ElementKind
from lotus.tui.style import StyledNode
from lotus.tui.utils import visible_width, wrap_text


@dataclass
class LayoutBox:
    """Absolute geometry of one styled node."""

    x: int
    y: int
    width: int
    height: int
    node: StyledNode
    children: list[LayoutBox] = field(default_factory=list)
    content_width: int = 0
    content_height: int = 0
    lines: list[str] = field(default_factory=list)

    @property
    def inner_x(self) -> int:
        st = self.node.style
        return self.x + st.border_width + st.padding_left

    @property
    def inner_y(self) -> int:
        st = self.node.style
        return self.y + st.border_width + st.padding_top

    @property
    def inner_width(self) -> int:
        st = self.node.style
        return max(0, self.width - 2 * st.border_width - st.padding_left - st.padding_right)

    @property
    def inner_height(self) -> int:
        st = self.node.style
        return max(0, self.height - 2 * st.border_width - st.padding_top - st.padding_bottom)

    def walk(self) -> Iterator[LayoutBox]:
        stack = [self]
        while stack:
            box = stack.pop()
            yield box
            stack.extend(reversed(box.children))

    def find(self, element: Element) -> LayoutBox | None:
        for box in self.walk():
            if box.node.element is element:
                return box
        return None


def _expand_tabs(text: str) -> str:
    return text.replace("\t", "   ")


def _frame(node: StyledNode) -> tuple[int, int]:
    st = node.style
    return (
        2 * st.border_width + st.padding_left + st.padding_right,
        2 * st.border_width + st.padding_top + st.padding_bottom,
    )


def _visible_children(node: StyledNode) -> list[StyledNode]:
    return [child for child in node.children if not child.style.hidden]


def _fixed_width(node: StyledNode, available: int) -> int | None:
    st = node.style
    if st.width is not None:
        return max(0, st.width)
    if st.width_percent is not None:
        return max(0, available * st.width_percent // 100)
    return None


def _fixed_height(node: StyledNode, available: int) -> int | None:
    st = node.style
    if st.height is not None:
        return max(0, st.height)
    if st.height_percent is not None:
        return max(0, available * st.height_percent // 100)
    return None


# ---------------------------------------------------------------------------
# Intrinsic size
# ---------------------------------------------------------------------------


def measure(node: StyledNode, available_width: int) -> tuple[int, int]:
    """Natural ``(width, height)`` of *node* when given *available_width*."""
    if node.style.hidden:
        return 0, 0
    if node.element.kind is ElementKind.COMPONENT:
        return measure(node.children[0], available_width) if node.children else (0, 0)

    frame_w, frame_h = _frame(node)
    fixed_w = _fixed_width(node, available_width)
    outer_w = fixed_w if fixed_w is not None else available_width
    inner_w = max(0, outer_w - frame_w)

    if node.element.kind is ElementKind.TEXT:
        lines = wrap_text(_expand_tabs(node.element.text), inner_w) if inner_w > 0 else []
        content_w = max((visible_width(line) for line in lines), default=0)
        content_h = len(lines)
    else:
        children = _visible_children(node)
        gaps = node.style.gap * max(0, len(children) - 1)
        if node.style.flex_direction == "row":
            content_w = content_h = 0
            remaining = inner_w
            for child in children:
                w, h = measure(child, max(0, remaining))
                content_w += w
                content_h = max(content_h, h)
                remaining -= w + node.style.gap
            content_w += gaps
        else:
            sizes = [measure(child, inner_w) for child in children]
            content_w = max((w for w, _ in sizes), default=0)
            content_h = sum(h for _, h in sizes) + gaps

    width = fixed_w if fixed_w is not None else min(available_width, content_w + frame_w)
    fixed_h = node.style.height
    height = fixed_h if fixed_h is not None else content_h + frame_h
    return max(0, width), max(0, height)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def compute(styled: StyledNode, width: int, height: int) -> LayoutBox:
    """Lay *styled* out in a ``width x height`` viewport."""
    root_w = _fixed_width(styled, width)
    root_h = _fixed_height(styled, height)
    return _layout(
        styled,
        0,
        0,
        min(width, root_w) if root_w is not None else width,
        min(height, root_h) if root_h is not None else height,
    )


def _layout(node: StyledNode, x: int, y: int, width: int, height: int) -> LayoutBox:
    box = LayoutBox(x, y, max(0, width), max(0, height), node)
    if node.style.hidden:
        box.width = box.height = 0
        return box

    kind = node.element.kind
    if kind is ElementKind.COMPONENT:
        if node.children:
            child = _layout(node.children[0], x, y, box.width, box.height)
            box.children = [child]
            box.content_width = child.width
            box.content_height = child.height
        return box

    inner_w, inner_h = box.inner_width, box.inner_height
    if kind is ElementKind.TEXT:
        box.lines = wrap_text(_expand_tabs(node.element.text), inner_w) if inner_w > 0 else []
        box.content_width = max((visible_width(line) for line in box.lines), default=0)
        box.content_height = len(box.lines)
        return box

    children = _visible_children(node)
    if not children:
        return box

    row = node.style.flex_direction == "row"
    gap = node.style.gap
    main_size = inner_w if row else inner_h
    scrolls = node.style.overflow == "auto"

    # main-axis base sizes
    bases: list[int] = []
    cross: list[int] = []
    used = gap * (len(children) - 1)
    for child in children:
        if row:
            cross_size = _fixed_height(child, inner_h)
            cross.append(cross_size if cross_size is not None else inner_h)
            fixed = _fixed_width(child, inner_w)
        else:
            cross_size = _fixed_width(child, inner_w)
            cross.append(cross_size if cross_size is not None else inner_w)
            fixed = _fixed_height(child, inner_h)

        if fixed is not None:
            base = fixed
        elif child.style.flex_grow > 0 and not scrolls:
            base = 0
        elif row:
            base = measure(child, max(0, main_size - used))[0]
        else:
            base = measure(child, cross[-1])[1]
        bases.append(base)
        used += base

    # distribute free space
    free = main_size - used
    growers = [i for i, child in enumerate(children) if child.style.flex_grow > 0 and _is_flexible(child, row)]
    if free > 0 and growers and not scrolls:
        total = sum(children[i].style.flex_grow for i in growers)
        given = 0
        for n, i in enumerate(growers):
            if n == len(growers) - 1:
                share = free - given
            else:
                share = free * children[i].style.flex_grow // total
            bases[i] += share
            given += share

    cursor = 0
    extent_main = 0
    extent_cross = 0
    for child, base, cross_size in zip(children, bases, cross):
        if row:
            child_box = _layout(child, box.inner_x + cursor, box.inner_y, base, cross_size)
        else:
            child_box = _layout(child, box.inner_x, box.inner_y + cursor, cross_size, base)
        box.children.append(child_box)
        cursor += base + gap
        extent_main = cursor - gap
        extent_cross = max(extent_cross, child_box.height if row else child_box.width)

    if row:
        box.content_width, box.content_height = extent_main, extent_cross
    else:
        box.content_width, box.content_height = extent_cross, extent_main
    return box


def _is_flexible(child: StyledNode, row: bool) -> bool:
    st = child.style
    if row:
        return st.width is None and st.width_percent is None
    return st.height is None and st.height_percent is None


# ---------------------------------------------------------------------------
# Scroll region detection
# ---------------------------------------------------------------------------


def find_scroll_region(styled: StyledNode) -> StyledNode | None:
    """The region arrow keys scroll: the first container (pre-order) with an
    explicit ``overflow: auto``, else the first with a non-zero
    ``flex-grow``."""
    containers = [node for node in styled.walk() if node.element.kind is ElementKind.CONTAINER]
    for node in containers:
        if node.style.overflow_explicit and node.style.overflow == "auto":
            return node
    for node in containers:
        if node.style.flex_grow > 0:
            return node
    return None
