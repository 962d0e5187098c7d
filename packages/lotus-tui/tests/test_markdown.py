"""Tests for Markdown rendering."""

from __future__ import annotations

from lotus.tui.element import Element, ElementKind
from lotus.tui.markdown import CODE_BACKGROUND, HEADING_COLOR, Markdown, markdown


def _lines(tree: Element) -> list[str]:
    return [child.plain_text() for child in tree.children]


class TestBlocks:
    def test_empty_source(self) -> None:
        assert markdown("").children == []

    def test_heading(self) -> None:
        tree = markdown("# Title\n\n## Section")
        title, section = tree.children
        assert title.text == "Title"
        assert title.styles["font-weight"] == "bold"
        assert title.styles["color"] == HEADING_COLOR
        assert title.styles["text-decoration"] == "underline"
        assert section.text == "Section"
        assert "text-decoration" not in section.styles

    def test_paragraphs(self) -> None:
        assert _lines(markdown("first\n\nsecond")) == ["first", "second"]

    def test_fenced_code(self) -> None:
        tree = markdown("```python\nline1\n\nline3\n```")
        (code,) = tree.children
        assert code.styles["background-color"] == CODE_BACKGROUND
        assert [child.text for child in code.children] == ["line1", " ", "line3"]

    def test_bullet_list(self) -> None:
        assert _lines(markdown("- one\n- two")) == ["- one", "- two"]

    def test_ordered_list_keeps_start(self) -> None:
        assert _lines(markdown("3. a\n4. b")) == ["3. a", "4. b"]

    def test_nested_list(self) -> None:
        assert _lines(markdown("- a\n  - b\n- c")) == ["- a", "  - b", "- c"]

    def test_blockquote(self) -> None:
        (quote,) = markdown("> quoted").children
        assert quote.styles["flex-direction"] == "row"
        assert quote.styles["font-style"] == "italic"
        assert quote.plain_text() == "│ quoted"

    def test_rule(self) -> None:
        assert _lines(markdown("---")) == ["─" * 40]

    def test_table(self) -> None:
        assert _lines(markdown("| a | bb |\n|---|---|\n| c | d |")) == [
            "│ a │ bb │",
            "├───┼────┤",
            "│ c │ d  │",
        ]


class TestInline:
    def test_emphasis_is_flattened(self) -> None:
        assert _lines(markdown("Hello **big** _world_")) == ["Hello big world"]

    def test_soft_break_becomes_space(self) -> None:
        assert _lines(markdown("one\ntwo")) == ["one two"]

    def test_inline_code(self) -> None:
        assert _lines(markdown("run `make`")) == ["run `make`"]

    def test_link_shows_target(self) -> None:
        assert _lines(markdown("see [docs](https://example.com)")) == ["see docs (https://example.com)"]

    def test_bare_url_stays_text(self) -> None:
        assert _lines(markdown("visit https://example.com")) == ["visit https://example.com"]


class TestComponent:
    def test_render_follows_source(self) -> None:
        doc = Markdown("# A")
        assert doc.render().plain_text() == "A"
        doc.set_source("plain")
        assert doc.render().plain_text() == "plain"

    def test_update_props(self) -> None:
        doc = Markdown("old")
        doc.update_props(Markdown("new"))
        assert doc.source == "new"

    def test_result_is_a_column(self) -> None:
        tree = Markdown("x").render()
        assert tree.kind is ElementKind.CONTAINER
        assert tree.styles["flex-direction"] == "column"
