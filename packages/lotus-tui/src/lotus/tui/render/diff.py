"""Differential rendering: two frames in, minimal terminal output out.

:func:`compute_diff` compares cells by full equality (glyph and style) and
groups dirty cells into maximal horizontal runs. :class:`DiffRenderer` turns
the result into escape sequences: one cursor move per run, with SGR
sequences only where the pen style changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lotus.tui.render.ansi import CURSOR_HOME, RESET, cursor_to, sgr
from lotus.tui.render.buffer import DEFAULT_STYLE, Buffer, Cell, Style


@dataclass(frozen=True)
class DiffRun:
    """Consecutive dirty cells of one row, starting at column ``x``."""

    x: int
    y: int
    cells: tuple[Cell, ...]

    @property
    def width(self) -> int:
        return len(self.cells)


@dataclass
class DiffResult:
    full_redraw: bool = False
    runs: list[DiffRun] = field(default_factory=list)

    @property
    def dirty_cells(self) -> int:
        return sum(run.width for run in self.runs)

    @property
    def is_empty(self) -> bool:
        return not self.full_redraw and not self.runs


def compute_diff(previous: Buffer | None, current: Buffer) -> DiffResult:
    """Compare two frames.

    ``previous is None`` (first frame) and a size mismatch (resize between
    frames) both yield ``full_redraw=True`` with no runs.
    """
    if previous is None:
        return DiffResult(full_redraw=True)
    if previous.width != current.width or previous.height != current.height:
        return DiffResult(full_redraw=True)

    result = DiffResult()
    for y in range(current.height):
        before = previous.row(y)
        after = current.row(y)
        x = 0
        while x < current.width:
            if before[x] == after[x]:
                x += 1
                continue
            start = x
            while x < current.width and before[x] != after[x]:
                x += 1
            end = x
            # never start on the right half of a wide glyph, never end on its left half
            if after[start].is_continuation and start > 0:
                start -= 1
            if end < current.width and after[end].is_continuation:
                end += 1
                x = end
            if result.runs and result.runs[-1].y == y and result.runs[-1].x + result.runs[-1].width >= start:
                merged = result.runs.pop()
                start = merged.x
            result.runs.append(DiffRun(start, y, tuple(after[start:end])))
    return result


class DiffRenderer:
    """Turns buffers into terminal output, tracking the pen between cells."""

    def __init__(self) -> None:
        self.last_output_size = 0

    def render(self, previous: Buffer | None, current: Buffer) -> str:
        """Bytes that turn a screen showing *previous* into *current*.

        Identical frames produce ``""``.
        """
        diff = compute_diff(previous, current)
        if diff.full_redraw:
            out = self.render_full(current)
        else:
            out = self.render_runs(diff.runs)
        self.last_output_size = len(out)
        return out

    def render_full(self, buffer: Buffer) -> str:
        parts: list[str] = [RESET, CURSOR_HOME]
        pen = DEFAULT_STYLE
        for y in range(buffer.height):
            if y > 0:
                parts.append(cursor_to(0, y))
            pen = self._emit_cells(parts, buffer.row(y), pen)
        if pen != DEFAULT_STYLE:
            parts.append(RESET)
        return "".join(parts)

    def render_runs(self, runs: list[DiffRun]) -> str:
        if not runs:
            return ""
        parts: list[str] = []
        pen = DEFAULT_STYLE
        for run in runs:
            parts.append(cursor_to(run.x, run.y))
            pen = self._emit_cells(parts, run.cells, pen)
        if pen != DEFAULT_STYLE:
            parts.append(RESET)
        return "".join(parts)

    @staticmethod
    def _emit_cells(parts: list[str], cells: list[Cell] | tuple[Cell, ...], pen: Style) -> Style:
        for cell in cells:
            if cell.is_continuation:
                continue
            if cell.style != pen:
                parts.append(sgr(cell.style))
                pen = cell.style
            parts.append(cell.char)
        return pen
