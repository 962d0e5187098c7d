"""Markdown to Element conversion.

Parsed with ``markdown-it-py``, which emits a flat open/close token stream
(``heading_open`` / ``inline`` / ``heading_close``). Block structure maps to
a column of elements; inline emphasis is flattened into the block's text
because a text leaf carries a single style.
"""

from __future__ import annotations

import logging

from markdown_it import MarkdownIt
from markdown_it.token import Token

from lotus.tui.element import Element, error_text, hstack, text, vstack

logger = logging.getLogger(__name__)

HEADING_COLOR = "#5fafff"
CODE_BACKGROUND = "#1a1a1a"
QUOTE_COLOR = "#808080"

# bare URLs stay plain text; linkify would need linkify-it-py
_parser = MarkdownIt("gfm-like", options_update={"linkify": False})


def markdown(source: str) -> Element:
    """Render *source* as a column of styled blocks.

    Parse failures yield an error placeholder instead of raising.
    """
    try:
        tokens = _parser.parse(source)
    except Exception as exc:
        logger.exception("markdown parse failed")
        return error_text(f"markdown: {exc}")
    blocks = _render_blocks(tokens, 0, len(tokens), depth=0)
    return vstack(*blocks)


class Markdown:
    """Component wrapper around :func:`markdown`."""

    def __init__(self, source: str = "") -> None:
        self.source = source

    def set_source(self, source: str) -> None:
        self.source = source

    def update_props(self, new_instance: Markdown) -> None:
        self.source = new_instance.source

    def render(self) -> Element:
        return markdown(self.source)


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def _render_blocks(tokens: list[Token], start: int, end: int, depth: int) -> list[Element]:
    blocks: list[Element] = []
    i = start
    while i < end:
        tok = tokens[i]
        t = tok.type

        if t == "heading_open":
            close = _find_close(tokens, i, end)
            level = int(tok.tag[1]) if tok.tag.startswith("h") and tok.tag[1:].isdigit() else 1
            content = _inline_text(tokens[i + 1]) if i + 1 < close else ""
            heading = text(content).with_style("font-weight", "bold").with_color(HEADING_COLOR)
            if level == 1:
                heading.with_style("text-decoration", "underline")
            blocks.append(heading)
            i = close + 1
            continue

        if t == "paragraph_open":
            close = _find_close(tokens, i, end)
            content = _inline_text(tokens[i + 1]) if i + 1 < close else ""
            blocks.append(text(content))
            i = close + 1
            continue

        if t in ("fence", "code_block"):
            code = tok.content[:-1] if tok.content.endswith("\n") else tok.content
            lines = [text(line or " ") for line in code.split("\n")]
            blocks.append(vstack(*lines).with_background(CODE_BACKGROUND).with_padding("0 1"))
            i += 1
            continue

        if t in ("bullet_list_open", "ordered_list_open"):
            close = _find_close(tokens, i, end)
            ordered = t == "ordered_list_open"
            number = _list_start(tok) if ordered else 1
            blocks.extend(_render_list(tokens, i + 1, close, ordered, number, depth))
            i = close + 1
            continue

        if t == "blockquote_open":
            close = _find_close(tokens, i, end)
            inner = _render_blocks(tokens, i + 1, close, depth)
            quote = hstack(text("│ "), vstack(*inner).with_flex_grow(1))
            quote.with_color(QUOTE_COLOR).with_style("font-style", "italic")
            blocks.append(quote)
            i = close + 1
            continue

        if t == "hr":
            blocks.append(text("─" * 40).with_color(QUOTE_COLOR))
            i += 1
            continue

        if t == "table_open":
            close = _find_close(tokens, i, end)
            blocks.extend(_render_table(tokens, i + 1, close))
            i = close + 1
            continue

        if t == "html_block":
            content = tok.content.rstrip("\n")
            if content:
                blocks.append(text(content))
            i += 1
            continue

        if t == "inline":
            blocks.append(text(_inline_text(tok)))
            i += 1
            continue

        i += 1
    return blocks


def _render_list(tokens: list[Token], start: int, end: int, ordered: bool, number: int, depth: int) -> list[Element]:
    items: list[Element] = []
    indent = "  " * depth
    i = start
    while i < end:
        tok = tokens[i]
        if tok.type != "list_item_open":
            i += 1
            continue
        close = _find_close(tokens, i, end)
        bullet = f"{indent}{number}. " if ordered else f"{indent}- "
        number += 1
        first = True
        j = i + 1
        while j < close:
            inner = tokens[j]
            if inner.type in ("bullet_list_open", "ordered_list_open"):
                nested_close = _find_close(tokens, j, close)
                nested_start = _list_start(inner) if inner.type == "ordered_list_open" else 1
                items.extend(
                    _render_list(tokens, j + 1, nested_close, inner.type == "ordered_list_open", nested_start, depth + 1)
                )
                j = nested_close + 1
                continue
            if inner.type == "inline":
                prefix = bullet if first else " " * len(bullet)
                items.append(text(prefix + _inline_text(inner)))
                first = False
            j += 1
        if first:
            items.append(text(bullet.rstrip()))
        i = close + 1
    return items


def _render_table(tokens: list[Token], start: int, end: int) -> list[Element]:
    rows: list[list[str]] = []
    current: list[str] | None = None
    for tok in tokens[start:end]:
        if tok.type == "tr_open":
            current = []
        elif tok.type == "inline" and current is not None:
            current.append(_inline_text(tok))
        elif tok.type == "tr_close" and current is not None:
            rows.append(current)
            current = None
    if not rows:
        return []
    columns = max(len(row) for row in rows)
    widths = [max((len(row[c]) if c < len(row) else 0) for row in rows) for c in range(columns)]

    def fmt(row: list[str]) -> str:
        cells = [(row[c] if c < len(row) else "").ljust(widths[c]) for c in range(columns)]
        return "│ " + " │ ".join(cells) + " │"

    result = [text(fmt(rows[0])).with_style("font-weight", "bold")]
    result.append(text("├─" + "─┼─".join("─" * w for w in widths) + "─┤"))
    result.extend(text(fmt(row)) for row in rows[1:])
    return result


# ---------------------------------------------------------------------------
# Inline
# ---------------------------------------------------------------------------


def _inline_text(tok: Token) -> str:
    """Flatten an ``inline`` token into plain text."""
    if tok.children is None:
        return tok.content
    parts: list[str] = []
    href = ""
    for child in tok.children:
        ct = child.type
        if ct == "text":
            parts.append(child.content)
        elif ct == "softbreak":
            parts.append(" ")
        elif ct == "hardbreak":
            parts.append("\n")
        elif ct == "code_inline":
            parts.append(f"`{child.content}`")
        elif ct == "link_open":
            href = str(child.attrs.get("href", "") or "")
        elif ct == "link_close":
            if href:
                parts.append(f" ({href})")
            href = ""
        elif ct == "image":
            parts.append(f"[{child.content or 'image'}]")
        elif ct == "html_inline":
            continue
        elif child.content:
            parts.append(child.content)
    return "".join(parts)


def _list_start(tok: Token) -> int:
    try:
        return int(tok.attrs.get("start", 1) or 1)
    except (TypeError, ValueError):
        return 1


def _find_close(tokens: list[Token], start: int, end: int) -> int:
    """Index of the token closing ``tokens[start]`` (nesting aware)."""
    depth = 0
    for i in range(start, end):
        depth += tokens[i].nesting
        if depth == 0:
            return i
    return end - 1
