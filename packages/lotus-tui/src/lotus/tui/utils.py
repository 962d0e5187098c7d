"""Text measurement helpers: grapheme clusters, display width, wrapping.

Cell buffers store one grapheme cluster per cell, so every width decision in
layout and painting goes through :func:`grapheme_width`.
"""

from __future__ import annotations

import unicodedata

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# Width cache (capped)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Graphemes
# ---------------------------------------------------------------------------


def graphemes(text: str) -> list[str]:
    """Split *text* into user-perceived characters."""
    if text.isascii():
        return list(text)
    return list(grapheme.graphemes(text))


def grapheme_width(g: str) -> int:
    """Return the terminal column width of a single grapheme cluster.

    Control characters and lone combining marks are zero width; emoji
    sequences (VS16, ZWJ, skin tones, flags) are two columns; everything
    else is delegated to ``wcwidth``.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    category = unicodedata.category(first)
    if category.startswith("M") or category == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Number of terminal columns *text* occupies (tabs count as 3)."""
    if not text:
        return 0
    text = text.replace("\t", "   ")
    if text.isascii() and text.isprintable():
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached
    return _cache_width(text, sum(grapheme_width(g) for g in graphemes(text)))


# ---------------------------------------------------------------------------
# Truncation / wrapping
# ---------------------------------------------------------------------------


def truncate_to_width(text: str, max_width: int, ellipsis: str = "") -> str:
    """Cut *text* so it fits in *max_width* columns, appending *ellipsis*
    (which counts towards the width) when something was removed.
    """
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return truncate_to_width(ellipsis, max_width)

    out: list[str] = []
    cols = 0
    for g in graphemes(text):
        w = grapheme_width(g)
        if cols + w > target:
            break
        out.append(g)
        cols += w
    return "".join(out) + ellipsis


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap plain *text* to *width* columns.

    Explicit newlines are preserved. Words longer than the width are broken
    at grapheme boundaries.
    """
    if width <= 0:
        return []

    lines: list[str] = []
    for paragraph in text.split("\n"):
        if visible_width(paragraph) <= width:
            lines.append(paragraph)
            continue

        current = ""
        current_width = 0
        for word in paragraph.split(" "):
            word_width = visible_width(word)
            sep = 1 if current else 0
            if current_width + sep + word_width <= width:
                current = f"{current} {word}" if current else word
                current_width += sep + word_width
                continue

            if current:
                lines.append(current)
                current, current_width = "", 0

            while word_width > width:
                head = truncate_to_width(word, width) or graphemes(word)[0]
                lines.append(head)
                word = word[len(head):]
                word_width = visible_width(word)
            current, current_width = word, word_width
        lines.append(current)
    return lines
