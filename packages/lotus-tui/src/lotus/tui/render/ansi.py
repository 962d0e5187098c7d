"""ANSI escape helpers for the cell renderer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lotus.tui.render.buffer import Style

RESET = "\x1b[0m"
CURSOR_HOME = "\x1b[H"

_NAMED_COLORS: dict[str, int] = {
    "black": 30,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "blue": 34,
    "magenta": 35,
    "cyan": 36,
    "white": 37,
    "gray": 90,
    "grey": 90,
    "bright-red": 91,
    "bright-green": 92,
    "bright-yellow": 93,
    "bright-blue": 94,
    "bright-magenta": 95,
    "bright-cyan": 96,
    "bright-white": 97,
}


def cursor_to(x: int, y: int) -> str:
    """Absolute cursor position; ``x``/``y`` are zero-based."""
    return f"\x1b[{y + 1};{x + 1}H"


def parse_hex(color: str) -> tuple[int, int, int] | None:
    """``"#rrggbb"`` or ``"#rgb"`` to an RGB triple, else ``None``."""
    if not color.startswith("#"):
        return None
    digits = color[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        return None
    try:
        value = int(digits, 16)
    except ValueError:
        return None
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def is_color(color: str) -> bool:
    color = color.strip().lower()
    return color in _NAMED_COLORS or parse_hex(color) is not None


def color_params(color: str, background: bool = False) -> list[str]:
    """SGR parameters selecting *color*; ``[]`` for the terminal default."""
    color = color.strip().lower()
    if not color:
        return []
    named = _NAMED_COLORS.get(color)
    if named is not None:
        return [str(named + 10 if background else named)]
    rgb = parse_hex(color)
    if rgb is None:
        return []
    r, g, b = rgb
    return ["48" if background else "38", "2", str(r), str(g), str(b)]


def sgr(style: Style) -> str:
    """Full SGR sequence for *style*, always starting from a reset."""
    params = ["0"]
    if style.bold:
        params.append("1")
    if style.dim:
        params.append("2")
    if style.italic:
        params.append("3")
    if style.underline:
        params.append("4")
    if style.reverse:
        params.append("7")
    if style.strikethrough:
        params.append("9")
    params.extend(color_params(style.fg))
    params.extend(color_params(style.bg, background=True))
    return "\x1b[" + ";".join(params) + "m"
