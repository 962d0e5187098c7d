"""Fixed-size grid of styled terminal cells.

Each cell holds one grapheme cluster. A glyph two columns wide occupies its
own cell plus a *continuation* cell to its right whose ``char`` is ``""``;
continuation cells are never written to the terminal.
"""

from __future__ import annotations

from dataclasses import dataclass

from lotus.tui.utils import grapheme_width, graphemes


@dataclass(frozen=True)
class Style:
    fg: str = ""
    bg: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    dim: bool = False
    reverse: bool = False


DEFAULT_STYLE = Style()


@dataclass(frozen=True)
class Cell:
    char: str = " "
    style: Style = DEFAULT_STYLE

    @property
    def is_continuation(self) -> bool:
        return self.char == ""


BLANK = Cell()


class Buffer:
    """``width x height`` cells, initially blank."""

    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._cells: list[list[Cell]] = [[BLANK] * self.width for _ in range(self.height)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set(self, x: int, y: int, cell: Cell) -> None:
        """Store *cell*; out-of-bounds writes are ignored."""
        if self.in_bounds(x, y):
            self._cells[y][x] = cell

    def get(self, x: int, y: int) -> Cell:
        if self.in_bounds(x, y):
            return self._cells[y][x]
        return BLANK

    def row(self, y: int) -> list[Cell]:
        return list(self._cells[y])

    def clear(self) -> None:
        for y in range(self.height):
            self._cells[y] = [BLANK] * self.width

    def fill(self, x: int, y: int, width: int, height: int, cell: Cell = BLANK) -> None:
        for row in range(max(0, y), min(self.height, y + height)):
            for col in range(max(0, x), min(self.width, x + width)):
                self._cells[row][col] = cell

    def put(self, x: int, y: int, char: str, style: Style = DEFAULT_STYLE, limit: int | None = None) -> int:
        """Place one grapheme at ``(x, y)`` and return the columns it used.

        A wide glyph that would cross *limit* (default: the right edge) is
        replaced by a space. Overwriting half of an existing wide glyph blanks
        the other half.
        """
        if not self.in_bounds(x, y):
            return 0
        right = self.width if limit is None else min(limit, self.width)
        width = grapheme_width(char)
        if width <= 0:
            return 0
        if width == 2 and x + 1 >= right:
            char, width = " ", 1

        row = self._cells[y]
        if row[x].is_continuation and x > 0:
            row[x - 1] = Cell(" ", row[x - 1].style)
        end = x + width
        if end < self.width and row[end].is_continuation:
            row[end] = Cell(" ", row[end].style)

        row[x] = Cell(char, style)
        if width == 2:
            row[x + 1] = Cell("", style)
        return width

    def write_text(
        self,
        x: int,
        y: int,
        text: str,
        style: Style = DEFAULT_STYLE,
        max_width: int | None = None,
    ) -> int:
        """Write *text* starting at ``(x, y)``; ``\\n`` restarts at column *x*
        on the next row. Returns the number of rows touched."""
        limit = self.width if max_width is None else min(self.width, x + max_width)
        rows = 1
        col = x
        for g in graphemes(text):
            if g == "\n":
                y += 1
                rows += 1
                col = x
                continue
            if col >= limit or y >= self.height:
                continue
            col += self.put(col, y, g, style, limit)
        return rows

    def clip(self, x: int, y: int, width: int, height: int) -> Buffer:
        """Copy the ``width x height`` window at ``(x, y)`` into a new buffer."""
        clipped = Buffer(width, height)
        for row in range(height):
            for col in range(width):
                src_x, src_y = x + col, y + row
                if self.in_bounds(src_x, src_y):
                    clipped._cells[row][col] = self._cells[src_y][src_x]
        # a wide glyph cut in half at either edge becomes a space
        for row in clipped._cells:
            if row and row[0].is_continuation:
                row[0] = Cell(" ", row[0].style)
            if row and grapheme_width(row[-1].char) == 2:
                row[-1] = Cell(" ", row[-1].style)
        return clipped

    def blit(self, source: Buffer, x: int, y: int) -> None:
        """Copy *source* onto this buffer with its top-left corner at ``(x, y)``."""
        for row in range(source.height):
            for col in range(source.width):
                self.set(x + col, y + row, source._cells[row][col])

    def clone(self) -> Buffer:
        copy = Buffer(0, 0)
        copy.width = self.width
        copy.height = self.height
        copy._cells = [list(row) for row in self._cells]
        return copy

    def lines(self) -> list[str]:
        return ["".join(cell.char for cell in row) for row in self._cells]

    def to_string(self) -> str:
        """Plain text of the grid, rows joined by ``\\n`` (styles dropped)."""
        return "\n".join(self.lines())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Buffer):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height) and self._cells == other._cells

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Buffer({self.width}x{self.height})"
