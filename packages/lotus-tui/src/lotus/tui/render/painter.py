"""Paints a layout tree into a cell :class:`Buffer`.

Children are clipped to their parent's content box. Containers with scroll
state (see :class:`lotus.tui.scroll.ScrollManager`) have their children
shifted by the current offset before clipping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lotus.tui.element import ElementKind
from lotus.tui.render.buffer import Buffer, Cell, Style
from lotus.tui.utils import grapheme_width, graphemes, visible_width

if TYPE_CHECKING:
    from lotus.tui.layout import LayoutBox
    from lotus.tui.scroll import ScrollManager
    from lotus.tui.style import ComputedStyle

# top-left, top-right, bottom-left, bottom-right, horizontal, vertical
BORDER_CHARS: dict[str, tuple[str, str, str, str, str, str]] = {
    "single": ("┌", "┐", "└", "┘", "─", "│"),
    "rounded": ("╭", "╮", "╰", "╯", "─", "│"),
    "double": ("╔", "╗", "╚", "╝", "═", "║"),
    "heavy": ("┏", "┓", "┗", "┛", "━", "┃"),
}


@dataclass(frozen=True)
class Rect:
    x0: int
    y0: int
    x1: int
    y1: int

    def intersect(self, other: Rect) -> Rect:
        return Rect(max(self.x0, other.x0), max(self.y0, other.y0), min(self.x1, other.x1), min(self.y1, other.y1))

    @property
    def empty(self) -> bool:
        return self.x0 >= self.x1 or self.y0 >= self.y1

    def contains_row(self, y: int) -> bool:
        return self.y0 <= y < self.y1


def cell_style(style: ComputedStyle, background: str = "", color: str | None = None) -> Style:
    return Style(
        fg=style.color if color is None else color,
        bg=style.background or background,
        bold=style.bold,
        italic=style.italic,
        underline=style.underline,
        strikethrough=style.strikethrough,
        dim=style.dim,
        reverse=style.reverse,
    )


class Painter:
    """Rasterises :class:`LayoutBox` trees."""

    def __init__(self, scroll: ScrollManager | None = None) -> None:
        self.scroll = scroll

    def paint(self, root: LayoutBox, width: int, height: int) -> Buffer:
        buffer = Buffer(width, height)
        self.paint_into(buffer, root)
        return buffer

    def paint_into(self, buffer: Buffer, root: LayoutBox) -> None:
        self._paint(buffer, root, 0, 0, Rect(0, 0, buffer.width, buffer.height), "")

    def _paint(self, buf: Buffer, box: LayoutBox, dx: int, dy: int, clip: Rect, background: str) -> None:
        node = box.node
        st = node.style
        if st.hidden or clip.empty:
            return

        if node.element.kind is ElementKind.COMPONENT:
            for child in box.children:
                self._paint(buf, child, dx, dy, clip, background)
            return

        outer = Rect(box.x - dx, box.y - dy, box.x - dx + box.width, box.y - dy + box.height).intersect(clip)
        if outer.empty:
            return

        if st.background:
            background = st.background
            fill = Cell(" ", Style(bg=background))
            buf.fill(outer.x0, outer.y0, outer.x1 - outer.x0, outer.y1 - outer.y0, fill)

        if st.border:
            self._paint_border(buf, box, dx, dy, clip, background)

        inner = Rect(
            box.inner_x - dx,
            box.inner_y - dy,
            box.inner_x - dx + box.inner_width,
            box.inner_y - dy + box.inner_height,
        ).intersect(clip)

        if node.element.kind is ElementKind.TEXT:
            self._paint_text(buf, box, dx, dy, inner, background)
            return

        child_dx, child_dy = dx, dy
        if self.scroll is not None and node.region_id in self.scroll:
            ox, oy = self.scroll.get_offset(node.region_id)
            child_dx += ox
            child_dy += oy
        for child in box.children:
            self._paint(buf, child, child_dx, child_dy, inner, background)

    def _paint_text(self, buf: Buffer, box: LayoutBox, dx: int, dy: int, clip: Rect, background: str) -> None:
        st = box.node.style
        style = cell_style(st, background)
        for i, line in enumerate(box.lines):
            if i >= box.inner_height:
                break
            y = box.inner_y + i - dy
            if not clip.contains_row(y):
                continue
            x = box.inner_x - dx
            if st.text_align != "left":
                slack = box.inner_width - visible_width(line)
                if slack > 0:
                    x += slack // 2 if st.text_align == "center" else slack
            for g in graphemes(line):
                width = grapheme_width(g)
                if width <= 0:
                    continue
                if x < clip.x0:
                    x += width
                    continue
                if x + width > clip.x1:
                    break
                buf.put(x, y, g, style, limit=clip.x1)
                x += width

    def _paint_border(self, buf: Buffer, box: LayoutBox, dx: int, dy: int, clip: Rect, background: str) -> None:
        if box.width < 2 or box.height < 2:
            return
        st = box.node.style
        tl, tr, bl, br, h, v = BORDER_CHARS.get(st.border_style, BORDER_CHARS["single"])
        style = cell_style(st, background, color=st.border_color or st.color)
        left, top = box.x - dx, box.y - dy
        right, bottom = left + box.width - 1, top + box.height - 1

        def put(x: int, y: int, char: str) -> None:
            if clip.x0 <= x < clip.x1 and clip.y0 <= y < clip.y1:
                buf.set(x, y, Cell(char, style))

        put(left, top, tl)
        put(right, top, tr)
        put(left, bottom, bl)
        put(right, bottom, br)
        for x in range(left + 1, right):
            put(x, top, h)
            put(x, bottom, h)
        for y in range(top + 1, bottom):
            put(left, y, v)
            put(right, y, v)
