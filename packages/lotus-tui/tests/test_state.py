"""Tests for saving and restoring component state."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from lotus.tui.components import Input, Tab, Tabs
from lotus.tui.element import Element, box, text
from lotus.tui.errors import StateError
from lotus.tui.state import STATE_VERSION, load_app_state, restore, save_app_state, snapshot


class Fussy:
    """Stateful component whose load_state always fails."""

    def render(self) -> Element:
        return text("fussy")

    def get_id(self) -> str:
        return "fussy"

    def save_state(self) -> dict[str, Any]:
        return {}

    def load_state(self, state: dict[str, Any]) -> None:
        raise ValueError("corrupt")


class TestSnapshot:
    def test_only_identified_components(self) -> None:
        tree = box(Input("name", value="ada"), Input(value="anon"), text("x"))
        data = snapshot(tree)
        assert data == {
            "version": STATE_VERSION,
            "components": {"name": {"value": "ada", "cursorPos": 3, "scroll": 0}},
        }

    def test_duplicate_id_keeps_first(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="lotus.tui.state"):
            data = snapshot(box(Input("dup", value="first"), Input("dup", value="second")))
        assert data["components"]["dup"]["value"] == "first"
        assert "duplicate component id" in caplog.text


class TestRoundTrip:
    def test_save_and_load(self, tmp_path: Path) -> None:
        path = str(tmp_path / "state.json")
        tabs = Tabs("tabs", [Tab("A"), Tab("B"), Tab("C")], active=2)
        assert save_app_state(box(Input("name", value="grace"), tabs), path) == 2

        field, fresh_tabs = Input("name"), Tabs("tabs", [Tab("A"), Tab("B"), Tab("C")])
        assert load_app_state(box(field, fresh_tabs), path) == 2
        assert field.value == "grace"
        assert field.cursor == 5
        assert fresh_tabs.active == 2

    def test_file_format(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        save_app_state(box(Input("q", value="hi")), str(path))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == "1.0"
        assert data["components"]["q"]["cursorPos"] == 2


class TestLoad:
    def test_missing_file_is_not_an_error(self, tmp_path: Path) -> None:
        assert load_app_state(box(Input("x")), str(tmp_path / "absent.json")) == 0

    def test_malformed_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StateError):
            load_app_state(box(Input("x")), str(path))

    def test_non_object_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(StateError):
            load_app_state(box(Input("x")), str(path))

    def test_unknown_ids_and_bad_entries_skipped(self) -> None:
        field = Input("x")
        data = {"components": {"x": "not a dict", "ghost": {"value": "boo"}}}
        assert restore(box(field), data) == 0
        assert field.value == ""

    def test_failing_component_does_not_stop_others(self, caplog: pytest.LogCaptureFixture) -> None:
        field = Input("x")
        data = {"components": {"fussy": {}, "x": {"value": "ok"}}}
        with caplog.at_level(logging.ERROR, logger="lotus.tui.state"):
            assert restore(box(Fussy(), field), data) == 1
        assert field.value == "ok"
        assert "load_state failed" in caplog.text

    def test_wrongly_typed_fields_ignored(self) -> None:
        field = Input("x", value="keep")
        restore(box(field), {"components": {"x": {"value": 42, "cursorPos": True, "scroll": "0"}}})
        assert field.value == "keep"
        assert field.cursor == 4

    def test_cursor_clamped_to_value(self) -> None:
        field = Input("x")
        restore(box(field), {"components": {"x": {"value": "abc", "cursorPos": 99}}})
        assert field.cursor == 3
