"""Tests for text measurement helpers."""

from __future__ import annotations

from lotus.tui.utils import grapheme_width, graphemes, truncate_to_width, visible_width, wrap_text


class TestGraphemes:
    def test_ascii(self) -> None:
        assert graphemes("abc") == ["a", "b", "c"]

    def test_combining_mark_joins_base(self) -> None:
        assert graphemes("éx") == ["é", "x"]

    def test_widths(self) -> None:
        assert grapheme_width("a") == 1
        assert grapheme_width("日") == 2
        assert grapheme_width("\x1b") == 0
        assert grapheme_width("") == 0


class TestVisibleWidth:
    def test_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_wide(self) -> None:
        assert visible_width("日本") == 4

    def test_tab_counts_three(self) -> None:
        assert visible_width("\t") == 3

    def test_empty(self) -> None:
        assert visible_width("") == 0


class TestTruncate:
    def test_fits(self) -> None:
        assert truncate_to_width("hello", 5) == "hello"

    def test_with_ellipsis(self) -> None:
        assert truncate_to_width("hello", 3, "…") == "he…"

    def test_wide_glyph_not_split(self) -> None:
        assert truncate_to_width("日本", 3) == "日"

    def test_zero_width(self) -> None:
        assert truncate_to_width("hello", 0) == ""


class TestWrapText:
    def test_word_wrap(self) -> None:
        assert wrap_text("hello world foo", 11) == ["hello world", "foo"]

    def test_newlines_preserved(self) -> None:
        assert wrap_text("a\nb", 10) == ["a", "b"]

    def test_long_word_broken(self) -> None:
        assert wrap_text("abcdefgh", 3) == ["abc", "def", "gh"]

    def test_empty_text_is_one_line(self) -> None:
        assert wrap_text("", 5) == [""]

    def test_zero_width(self) -> None:
        assert wrap_text("abc", 0) == []
