"""Tests for the Modal component."""

from __future__ import annotations

from lotus.tui.components import Modal, ModalButton
from lotus.tui.components.modal import FOCUS_BACKGROUND
from lotus.tui.keys import SEQ_LEFT, SEQ_RIGHT, KeyEvent


def _dialog(**kwargs: object) -> tuple[Modal, list[str]]:
    clicks: list[str] = []
    buttons = [
        ModalButton("OK", lambda ctx: clicks.append("ok")),
        ModalButton("Later", lambda ctx: clicks.append("later"), disabled=True),
        ModalButton("Cancel", lambda ctx: clicks.append("cancel")),
    ]
    return Modal("dialog", title="Save?", content="Unsaved changes", buttons=buttons, open=True, **kwargs), clicks


class TestOpenClose:
    def test_closed_modal_renders_nothing(self) -> None:
        assert Modal("m").render() is None
        assert not Modal("m").is_focusable()

    def test_show_and_close(self) -> None:
        closed: list[object] = []
        modal = Modal("m", on_close=closed.append)
        modal.show()
        assert modal.is_open() and modal.is_focusable()
        modal.close()
        assert not modal.is_open()
        assert closed == [None]

    def test_close_twice_calls_back_once(self) -> None:
        closed: list[object] = []
        modal = Modal("m", open=True, on_close=closed.append)
        modal.close()
        modal.close()
        assert len(closed) == 1

    def test_escape_via_handle_key(self) -> None:
        modal, _ = _dialog()
        assert modal.handle_key(KeyEvent(key=27))
        assert not modal.open

    def test_escape_refused(self) -> None:
        modal, _ = _dialog(close_on_escape=False)
        assert not modal.should_close_on_escape()
        assert not modal.handle_key(KeyEvent(key=27))
        assert modal.open


class TestButtons:
    def test_enter_presses_focused_button(self) -> None:
        modal, clicks = _dialog()
        assert modal.handle_key(KeyEvent(key=13))
        assert clicks == ["ok"]

    def test_navigation_skips_disabled(self) -> None:
        modal, clicks = _dialog()
        modal.handle_key(KeyEvent.from_code(SEQ_RIGHT))
        assert modal.button_index == 2
        modal.handle_key(KeyEvent.from_code(SEQ_RIGHT))
        assert modal.button_index == 0
        modal.handle_key(KeyEvent.from_code(SEQ_LEFT))
        modal.handle_key(KeyEvent.from_char(" "))
        assert clicks == ["cancel"]

    def test_press_without_buttons(self) -> None:
        modal = Modal("m", open=True)
        assert not modal.press()
        assert not modal.handle_key(KeyEvent(key=13))

    def test_keys_ignored_while_closed(self) -> None:
        modal, clicks = _dialog()
        modal.close()
        assert not modal.handle_key(KeyEvent(key=13))
        assert clicks == []


class TestRender:
    def test_layout(self) -> None:
        modal, _ = _dialog()
        tree = modal.render()
        assert tree.id == "dialog"
        assert tree.styles["border"] == "double"
        assert tree.plain_text() == "Save?Unsaved changesOKLaterCancel"

    def test_focused_button_highlighted(self) -> None:
        modal, _ = _dialog()
        modal.set_focus_state(True)
        buttons = modal.render().children[2]
        assert buttons.children[0].styles["background-color"] == FOCUS_BACKGROUND
        assert "background-color" not in buttons.children[2].styles


class TestState:
    def test_round_trip(self) -> None:
        modal, _ = _dialog()
        modal.handle_key(KeyEvent.from_code(SEQ_RIGHT))
        fresh, _ = _dialog()
        fresh.close()
        fresh.load_state(modal.save_state())
        assert fresh.open
        assert fresh.button_index == 2

    def test_bad_button_index_ignored(self) -> None:
        modal, _ = _dialog()
        modal.load_state({"button": 9, "open": "yes"})
        assert modal.button_index == 0
        assert modal.open
