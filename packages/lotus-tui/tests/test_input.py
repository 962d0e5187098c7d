"""Tests for the single-line Input component."""

from __future__ import annotations

from lotus.tui.commands import CommandRegistry
from lotus.tui.components import Input
from lotus.tui.context import Context
from lotus.tui.keys import (
    SEQ_CTRL_LEFT,
    SEQ_CTRL_RIGHT,
    SEQ_DELETE,
    SEQ_END,
    SEQ_F1,
    SEQ_HOME,
    SEQ_LEFT,
    SEQ_RIGHT,
    KeyEvent,
    parse_keys,
)


def _type(field: Input, data: str, ctx: Context | None = None) -> None:
    for event in parse_keys(data):
        field.handle_key(event, ctx)


def _code(code: str) -> KeyEvent:
    return KeyEvent.from_code(code)


class RenderCounter:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> None:
        self.count += 1


class TestEditing:
    def test_typing_appends(self) -> None:
        field = Input()
        _type(field, "hello")
        assert field.value == "hello"
        assert field.cursor == 5

    def test_insert_in_the_middle(self) -> None:
        field = Input(value="hllo")
        field.handle_key(_code(SEQ_HOME))
        field.handle_key(_code(SEQ_RIGHT))
        field.handle_key(KeyEvent.from_char("e"))
        assert field.value == "hello"
        assert field.cursor == 2

    def test_backspace_and_delete(self) -> None:
        field = Input(value="abc")
        field.handle_key(KeyEvent(key=127))
        assert field.value == "ab"
        field.handle_key(_code(SEQ_HOME))
        field.handle_key(_code(SEQ_DELETE))
        assert field.value == "b"
        assert field.cursor == 0

    def test_backspace_at_start_is_harmless(self) -> None:
        field = Input(value="a")
        field.handle_key(_code(SEQ_HOME))
        assert field.handle_key(KeyEvent(key=127))
        assert field.value == "a"

    def test_paste_drops_newlines(self) -> None:
        field = Input()
        field.handle_key(KeyEvent(char="one\ntwo\r\n", paste=True))
        assert field.value == "onetwo"

    def test_grapheme_aware_motion(self) -> None:
        field = Input(value="ae\u0301")
        field.handle_key(_code(SEQ_LEFT))
        assert field.cursor == 1
        field.handle_key(_code(SEQ_RIGHT))
        assert field.cursor == 3
        field.handle_key(KeyEvent(key=127))
        assert field.value == "a"

    def test_home_and_end(self) -> None:
        field = Input(value="abc")
        field.handle_key(_code(SEQ_HOME))
        assert field.cursor == 0
        field.handle_key(_code(SEQ_END))
        assert field.cursor == 3

    def test_word_motion(self) -> None:
        field = Input(value="hello big world")
        field.handle_key(_code(SEQ_CTRL_LEFT))
        assert field.cursor == 10
        field.handle_key(_code(SEQ_HOME))
        field.handle_key(_code(SEQ_CTRL_RIGHT))
        assert field.cursor == 5

    def test_ctrl_w_deletes_previous_word(self) -> None:
        field = Input(value="hello big world")
        field.handle_key(KeyEvent.ctrl("w"))
        assert field.value == "hello big "
        assert field.cursor == 10

    def test_ctrl_u_and_ctrl_k(self) -> None:
        field = Input(value="hello world")
        field.cursor = 6
        field.handle_key(KeyEvent.ctrl("u"))
        assert (field.value, field.cursor) == ("world", 0)

        field = Input(value="hello world")
        field.cursor = 5
        field.handle_key(KeyEvent.ctrl("k"))
        assert field.value == "hello"

    def test_unhandled_keys_bubble(self) -> None:
        field = Input()
        assert not field.handle_key(_code(SEQ_F1))
        assert not field.handle_key(KeyEvent(key=9))

    def test_disabled_ignores_keys(self) -> None:
        field = Input(disabled=True)
        assert not field.handle_key(KeyEvent.from_char("a"))
        assert field.value == ""
        assert not field.is_focusable()


class TestCallbacks:
    def test_on_change_only_on_real_changes(self) -> None:
        changes: list[str] = []
        field = Input(value="ab", on_change=lambda ctx, value: changes.append(value))
        field.handle_key(_code(SEQ_LEFT))
        field.handle_key(KeyEvent.from_char("x"))
        assert changes == ["axb"]

    def test_submit_clears_and_rerenders(self) -> None:
        submitted: list[str] = []
        changes: list[str] = []
        renders = RenderCounter()
        ctx = Context(renders, commands=CommandRegistry())
        field = Input(
            on_submit=lambda ctx, value: submitted.append(value),
            on_change=lambda ctx, value: changes.append(value),
        )
        _type(field, "hi", ctx)
        assert field.handle_key(KeyEvent(key=13), ctx) is False
        assert submitted == ["hi"]
        assert field.value == "" and field.cursor == 0
        assert changes == ["h", "hi", ""]
        assert renders.count == 1

    def test_matching_command_preempts_submit(self) -> None:
        submitted: list[str] = []
        ran: list[list[str]] = []
        commands = CommandRegistry()
        commands.add("clear", "Clear", lambda ctx, args: ran.append(args))
        ctx = Context(RenderCounter(), commands=commands)
        field = Input(value="/clear all", on_submit=lambda ctx, value: submitted.append(value))
        field.handle_key(KeyEvent(key=13), ctx)
        assert ran == [["all"]]
        assert submitted == []
        assert field.value == ""

    def test_unknown_command_goes_to_submit(self) -> None:
        submitted: list[str] = []
        ctx = Context(RenderCounter(), commands=CommandRegistry())
        field = Input(value="/nope", on_submit=lambda ctx, value: submitted.append(value))
        field.handle_key(KeyEvent(key=13), ctx)
        assert submitted == ["/nope"]

    def test_without_submit_handler_value_stays(self) -> None:
        field = Input(value="draft")
        field.handle_key(KeyEvent(key=13))
        assert field.value == "draft"


class TestScrolling:
    def test_long_value_scrolls_to_cursor(self) -> None:
        field = Input(value="abcdefgh", width=5)
        assert field.scroll == 4
        assert field.cursor_offset() == 2 + 8 - 4
        assert field.render().plain_text() == "> efgh"

    def test_moving_left_scrolls_back(self) -> None:
        field = Input(value="abcdefgh", width=5)
        field.handle_key(_code(SEQ_HOME))
        assert field.scroll == 0
        assert field.render().plain_text() == "> abcde"


class TestRender:
    def test_unfocused_value(self) -> None:
        assert Input(value="ab").render().plain_text() == "> ab"

    def test_focused_shows_block_cursor(self) -> None:
        field = Input(value="ab")
        field.set_focus_state(True)
        tree = field.render()
        assert tree.plain_text() == "> ab "
        cursor = [node for _, node in tree.walk() if node.styles.get("reverse") == "true"]
        assert [node.text for node in cursor] == [" "]

    def test_cursor_over_character(self) -> None:
        field = Input(value="ab")
        field.handle_key(_code(SEQ_HOME))
        field.set_focus_state(True)
        cursor = [node for _, node in field.render().walk() if node.styles.get("reverse") == "true"]
        assert [node.text for node in cursor] == ["a"]

    def test_placeholder(self) -> None:
        field = Input(placeholder="Type here")
        assert field.render().plain_text() == "> Type here"
        field.set_focus_state(True)
        tree = field.render()
        assert tree.plain_text() == "> Type here"
        cursor = [node for _, node in tree.walk() if node.styles.get("reverse") == "true"]
        assert [node.text for node in cursor] == ["T"]

    def test_id_on_root(self) -> None:
        assert Input("name").render().id == "name"


class TestState:
    def test_save_state_keys(self) -> None:
        field = Input("x", value="abc")
        assert field.save_state() == {"value": "abc", "cursorPos": 3, "scroll": 0}

    def test_update_props_keeps_value(self) -> None:
        field = Input("x", value="typed")
        field.update_props(Input("x", placeholder="new", disabled=True))
        assert field.value == "typed"
        assert field.placeholder == "new"
        assert field.disabled
