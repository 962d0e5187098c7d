"""Cell buffers, painting and differential output."""

from lotus.tui.render.buffer import BLANK, DEFAULT_STYLE, Buffer, Cell, Style
from lotus.tui.render.diff import DiffRenderer, DiffResult, DiffRun, compute_diff
from lotus.tui.render.painter import Painter

__all__ = [
    "BLANK",
    "DEFAULT_STYLE",
    "Buffer",
    "Cell",
    "Style",
    "DiffRenderer",
    "DiffResult",
    "DiffRun",
    "compute_diff",
    "Painter",
]
