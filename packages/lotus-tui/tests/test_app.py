"""End-to-end tests: App driving a VirtualTerminal."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from pathlib import Path
from typing import Any, AsyncIterator

import pytest

from lotus.tui.app import App
from lotus.tui.commands import CommandRegistry
from lotus.tui.components import Input, StreamingText, Tab, Tabs
from lotus.tui.config import RuntimeConfig
from lotus.tui.element import Element, box, text
from lotus.tui.errors import StateError
from lotus.tui.keys import SEQ_RIGHT, KeyEvent
from lotus.tui.render.ansi import CURSOR_HOME, RESET

from .virtual_terminal import VirtualTerminal


def _app(root: Any, rows: int = 3, columns: int = 20, **kwargs: Any) -> tuple[App, VirtualTerminal]:
    terminal = VirtualTerminal(rows=rows, columns=columns)
    config = kwargs.pop("config", RuntimeConfig())
    return App(root, terminal=terminal, config=config, **kwargs), terminal


@contextlib.asynccontextmanager
async def _running(app: App) -> AsyncIterator[None]:
    """Run *app* in the background for the body of the block."""
    task = asyncio.ensure_future(app.run_async())
    await asyncio.sleep(0)
    try:
        yield
    finally:
        app.exit()
        await task


def _input_form(ctx: Any) -> Element:
    return box(Input("name"))


def _log_region() -> Element:
    return box(*[text(str(i)) for i in range(10)]).with_id("log").with_overflow("auto").with_flex_grow(1)


class TestRenderFrame:
    def test_first_frame_is_full_redraw(self) -> None:
        app, terminal = _app(box(text("hello")))
        output = app.render_frame()
        assert output.startswith(RESET + CURSOR_HOME)
        assert terminal.screen_lines() == ["hello", "", ""]

    def test_unchanged_frame_writes_nothing(self) -> None:
        app, terminal = _app(box(text("hello")))
        app.render_frame()
        writes = terminal.write_count
        assert app.render_frame() == ""
        assert terminal.write_count == writes
        assert app.frames == 2

    def test_string_root(self) -> None:
        app, terminal = _app("plain")
        app.render_frame()
        assert terminal.screen_lines()[0] == "plain"

    def test_callable_root_gets_context(self) -> None:
        seen: list[Any] = []

        def root(ctx: Any) -> Element:
            seen.append(ctx)
            return text("fn")

        app, terminal = _app(root)
        app.render_frame()
        assert seen == [app.context]
        assert terminal.screen_lines()[0] == "fn"

    def test_failing_root_shows_error(self) -> None:
        def root(ctx: Any) -> Element:
            raise RuntimeError("boom")

        app, terminal = _app(root, columns=30)
        app.render_frame()
        assert terminal.screen_lines()[0] == "[error] boom"

    def test_scroll_region_follows_arrow_keys(self) -> None:
        app, terminal = _app(box(_log_region()), rows=4, columns=5)
        app.render_frame()
        assert terminal.screen_lines() == ["6", "7", "8", "9"]
        assert app.router.scroll_region_id == "log"

        app.handle_input("\x1b[A")
        assert terminal.screen_lines() == ["5", "6", "7", "8"]

    def test_static_root_shows_stream_updates(self) -> None:
        stream = StreamingText()
        app, terminal = _app(box(stream))
        app.render_frame()
        assert terminal.screen_lines()[0] == "▌"

        stream.append("hello")
        app.render_frame()
        assert terminal.screen_lines()[0] == "hello▌"

    def test_static_root_shows_tab_switch(self) -> None:
        tabs = Tabs("t", [Tab("A", "aaa"), Tab("B", "bbb")])
        app, terminal = _app(box(tabs))
        app.render_frame()
        assert "aaa" in terminal.screen_text()

        app.handle_input(SEQ_RIGHT)
        assert tabs.active == 1
        screen = terminal.screen_text()
        assert "bbb" in screen
        assert "aaa" not in screen


class TestInput:
    def test_typing_updates_screen(self) -> None:
        app, terminal = _app(_input_form)
        app.render_frame()
        assert terminal.screen_lines()[0] == " >"

        app.handle_input("hi")
        assert app.focus.focused().value == "hi"
        assert terminal.screen_lines()[0] == " > hi"

    def test_ctrl_c_exits_and_drops_the_rest(self) -> None:
        app, _ = _app(_input_form)
        app.render_frame()
        app.handle_input("\x03x")
        assert app.focus.focused().value == ""
        assert not app.handle_key(KeyEvent(key=4))

    def test_command_runs_and_clears_input(self) -> None:
        greeted: list[list[str]] = []
        commands = CommandRegistry()
        commands.add("greet", "Say hello", lambda ctx, args: greeted.append(args))
        app, terminal = _app(_input_form, commands=commands)
        app.render_frame()

        app.handle_input("/greet bob\r")
        assert greeted == [["bob"]]
        assert app.focus.focused().value == ""
        assert terminal.screen_lines()[0] == " >"

    def test_help_goes_to_the_log(self, caplog: pytest.LogCaptureFixture) -> None:
        app, _ = _app(_input_form)
        app.render_frame()
        with caplog.at_level(logging.INFO, logger="lotus.tui.app"):
            app.handle_input("/help\r")
        assert "Available commands:" in caplog.text


class TestDevTools:
    def test_toggle_and_move_panel(self) -> None:
        app, terminal = _app("hello", rows=10, columns=60, config=RuntimeConfig(dev=True))
        app.render_frame()
        assert "DevTools" not in terminal.screen_text()

        app.handle_input("\x14")
        assert app.devtools.enabled
        screen = terminal.screen_text()
        assert "DevTools" in screen
        assert "hello" in screen

        app.handle_input("\x10")
        assert app.devtools.position == "bottom"

    def test_no_dev_bindings_outside_dev_mode(self) -> None:
        app, _ = _app("hello")
        assert len(app.keybindings) == 0


class TestState:
    def test_save_requires_a_path(self) -> None:
        app, _ = _app(_input_form)
        with pytest.raises(StateError):
            app.save_state()

    def test_save_state(self, tmp_path: Path) -> None:
        app, _ = _app(_input_form)
        app.render_frame()
        app.handle_input("draft")
        path = tmp_path / "state.json"
        assert app.save_state(str(path)) == 1
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["components"]["name"]["value"] == "draft"

    @pytest.mark.asyncio
    async def test_restore_on_start_removes_file(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(
            json.dumps({"version": "1.0", "components": {"name": {"value": "saved", "cursorPos": 5, "scroll": 0}}}),
            encoding="utf-8",
        )
        app, terminal = _app(_input_form, config=RuntimeConfig(state_path=str(path)))

        async with _running(app):
            assert app.focus.focused().value == "saved"
            assert terminal.screen_lines()[0] == " > saved"
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_unreadable_state_is_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")
        app, _ = _app(_input_form, config=RuntimeConfig(state_path=str(path)))

        async with _running(app):
            assert app.focus.focused().value == ""
        assert not path.exists()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_run_until_ctrl_c(self) -> None:
        app, terminal = _app(box(text("running")))
        seen: dict[str, Any] = {}

        def press_ctrl_c() -> None:
            seen["started"] = terminal.started
            seen["alt_screen"] = terminal.alt_screen
            seen["cursor_visible"] = terminal.cursor_visible
            seen["line"] = terminal.screen_lines()[0]
            terminal.simulate_input("\x03")

        asyncio.get_running_loop().call_soon(press_ctrl_c)
        await app.run_async()
        assert seen == {"started": True, "alt_screen": True, "cursor_visible": False, "line": "running"}
        assert not terminal.started
        assert not terminal.alt_screen
        assert terminal.cursor_visible

    @pytest.mark.asyncio
    async def test_renders_coalesce_within_a_tick(self) -> None:
        app, _ = _app(box(text("x")))
        async with _running(app):
            before = app.frames
            app.request_render()
            app.request_render()
            app.request_render()
            await asyncio.sleep(0)
            assert app.frames == before + 1

    @pytest.mark.asyncio
    async def test_resize_redraws_everything(self) -> None:
        app, terminal = _app(box(text("wide")), rows=2, columns=10)
        async with _running(app):
            terminal.clear_buffer()
            terminal.simulate_resize(rows=3, columns=6)
            await asyncio.sleep(0)
            assert terminal.output.startswith("\x1b[2J\x1b[H" + RESET + CURSOR_HOME)
            assert terminal.screen_lines() == ["wide", "", ""]

    @pytest.mark.asyncio
    async def test_rerender_from_worker_thread(self) -> None:
        lines: list[str] = []

        def root(ctx: Any) -> Element:
            return box(*[text(line) for line in lines])

        app, terminal = _app(root)

        def worker() -> None:
            lines.append("from thread")
            app.context.rerender()

        async with _running(app):
            await asyncio.get_running_loop().run_in_executor(None, worker)
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            assert terminal.screen_lines()[0] == "from thread"

    @pytest.mark.asyncio
    async def test_no_alt_screen_when_disabled(self) -> None:
        app, terminal = _app("x", config=RuntimeConfig(alt_screen=False))
        async with _running(app):
            assert terminal.started
            assert not terminal.alt_screen

    @pytest.mark.asyncio
    async def test_arrow_split_across_reads(self) -> None:
        app, terminal = _app(box(_log_region()), rows=4, columns=5)
        async with _running(app):
            terminal.simulate_input("\x1b[")
            assert terminal.screen_lines() == ["6", "7", "8", "9"]
            terminal.simulate_input("A")
            await asyncio.sleep(0)
            assert terminal.screen_lines() == ["5", "6", "7", "8"]

    @pytest.mark.asyncio
    async def test_exit_drops_pending_input(self) -> None:
        app, _ = _app(_input_form)
        app.input.timeout = 10.0
        async with _running(app):
            app.handle_input("a\x1b")
            assert app.input.pending == "\x1b"
        assert app.input.pending == ""
        assert app.focus.focused().value == "a"
