"""The application runtime.

:class:`App` owns the long-lived pieces (component cache, focus, scroll
state, the previous frame) and drives the per-frame pipeline:

    root -> Element tree -> reconcile + focus -> styles -> layout
         -> paint into a Buffer -> diff against the previous Buffer
         -> terminal

Input bytes are decoded into key events and handed to the
:class:`lotus.tui.events.EventRouter`. Renders requested while handling
input (or from other threads via :class:`lotus.tui.context.Context`) are
coalesced into one frame per loop tick.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from lotus.tui.commands import CommandRegistry
from lotus.tui.config import RuntimeConfig, configure_logging
from lotus.tui.context import Context
from lotus.tui.devtools import DevTools, wrap_with_devtools
from lotus.tui.element import Element, ElementKind, error_text, is_component, mount, text, to_element
from lotus.tui.errors import StateError
from lotus.tui.events import EventRouter
from lotus.tui.focus import FocusManager
from lotus.tui.keybindings import KeyBindingRegistry
from lotus.tui.input_buffer import InputBuffer
from lotus.tui.keys import KeyEvent
from lotus.tui.layout import LayoutBox, compute, find_scroll_region
from lotus.tui.reconciler import ComponentCache, Reconciler
from lotus.tui.render import Buffer, DiffRenderer, Painter
from lotus.tui.scroll import ScrollManager
from lotus.tui.state import load_app_state, save_app_state
from lotus.tui.style import StyledNode, resolve
from lotus.tui.terminal import ProcessTerminal, Terminal

logger = logging.getLogger(__name__)


class App:
    """A mounted application.

    *root* may be a component, an :class:`Element` (re-used every frame), a
    plain string, or a function ``fn(ctx) -> Element`` called for every
    frame.
    """

    def __init__(
        self,
        root: Any,
        *,
        keybindings: KeyBindingRegistry | None = None,
        commands: CommandRegistry | None = None,
        config: RuntimeConfig | None = None,
        terminal: Terminal | None = None,
    ) -> None:
        self.root = root
        self.config = config if config is not None else RuntimeConfig.from_env()
        self.keybindings = keybindings if keybindings is not None else KeyBindingRegistry()
        self.commands = commands if commands is not None else CommandRegistry()
        self.terminal = terminal

        self.reconciler = Reconciler(ComponentCache(self.config.cache_size))
        self.focus = FocusManager(self.reconciler)
        self.scroll = ScrollManager()
        self.painter = Painter(self.scroll)
        self.differ = DiffRenderer()
        self.input = InputBuffer(self._dispatch_keys)
        self.devtools = DevTools(enabled=self.config.dev)

        self.context = Context(
            self.request_render,
            commands=self.commands,
            keybindings=self.keybindings,
            scroll=self.scroll,
            focus=self.focus,
            on_exit=self.exit,
        )
        self.router = EventRouter(
            self.focus,
            self.scroll,
            self.keybindings,
            request_render=self.request_render,
            context=self.context,
        )
        if not self.commands.has_display_handler:
            self.commands.set_display_handler(self._display_line)
        if self.config.dev:
            self.keybindings.register_key("t", True, "Toggle devtools", self._toggle_devtools)
            self.keybindings.register_key("p", True, "Move devtools panel", self._cycle_devtools)

        self.tree: Element | None = None
        self.buffer: Buffer | None = None
        self.layout: LayoutBox | None = None
        self.frames = 0
        self._render_requested = False
        self._full_redraw = True
        self._running = False
        self._exit_event: asyncio.Event | None = None
        self._log_handler: logging.Handler | None = None

    # ------------------------------------------------------------------
    # Frame pipeline
    # ------------------------------------------------------------------

    def build_tree(self) -> Element:
        """Render the root and restore component identity and focus."""
        app_tree = self._render_root()
        self.focus.rebuild(app_tree)
        self.tree = app_tree
        self.router.tree = app_tree
        return app_tree

    def _render_root(self) -> Element:
        root = self.root
        if is_component(root):
            return mount(root)
        if isinstance(root, Element):
            return root.clone()
        if isinstance(root, str):
            return text(root)
        if callable(root):
            try:
                return to_element(root(self.context))
            except Exception as exc:
                logger.exception("root render function failed")
                return error_text(str(exc))
        return to_element(root)

    def render_frame(self) -> str:
        """Build, lay out and paint one frame and write the difference.

        Returns what was written (``""`` when nothing changed).
        """
        terminal = self._require_terminal()
        width, height = max(0, terminal.columns), max(0, terminal.rows)

        app_tree = self.build_tree()
        screen = wrap_with_devtools(app_tree, self.devtools)
        styled = resolve(screen)
        layout = compute(styled, width, height)
        self.router.scroll_region_id = self._update_scroll(styled, layout, app_tree)

        buffer = self.painter.paint(layout, width, height)
        previous = None if self._full_redraw else self.buffer
        output = self.differ.render(previous, buffer)
        if output:
            terminal.write(output)

        self.layout = layout
        self.buffer = buffer
        self._full_redraw = False
        self.frames += 1
        return output

    def _update_scroll(self, styled: StyledNode, layout: LayoutBox, app_tree: Element) -> str:
        """Feed measured sizes to the scroll manager; return the id of the
        region arrow keys scroll (``""`` if none)."""
        app_node = next((node for node in styled.walk() if node.element is app_tree), styled)
        region = find_scroll_region(app_node)
        region_id = region.region_id if region is not None else ""
        for box in layout.walk():
            node = box.node
            if node.element.kind is not ElementKind.CONTAINER:
                continue
            if node is region or node.style.overflow == "auto":
                self.scroll.update_dimensions(
                    node.region_id,
                    box.content_width,
                    box.content_height,
                    box.inner_width,
                    box.inner_height,
                )
        return region_id

    # ------------------------------------------------------------------
    # Render scheduling
    # ------------------------------------------------------------------

    def request_render(self) -> None:
        """Schedule a frame on the next loop tick. Calls coalesce."""
        if self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._render_tick()
            return
        loop.call_soon(self._render_tick)

    def _render_tick(self) -> None:
        self._render_requested = False
        if self.terminal is None:
            return
        try:
            self.render_frame()
        except Exception:
            logger.exception("frame render failed")

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        """Feed raw terminal input. A sequence cut off at the end of *data*
        waits briefly for the rest."""
        self.input.feed(data)

    def _dispatch_keys(self, events: list[KeyEvent]) -> None:
        for event in events:
            if not self.handle_key(event):
                # exiting: the rest of the batch is dropped
                self.input.clear()
                return

    def handle_key(self, event: KeyEvent) -> bool:
        """Route one event; returns ``False`` once the app is exiting."""
        if self.router.handle_key(event):
            return True
        self.exit()
        return False

    def _on_resize(self) -> None:
        self._full_redraw = True
        if self.terminal is not None:
            self.terminal.clear_screen()
        self.request_render()

    # ------------------------------------------------------------------
    # DevTools
    # ------------------------------------------------------------------

    def _toggle_devtools(self, ctx: Context | None, event: KeyEvent) -> bool:
        enabled = self.devtools.toggle()
        logger.info("devtools %s", "shown" if enabled else "hidden")
        self._full_redraw = True
        return True

    def _cycle_devtools(self, ctx: Context | None, event: KeyEvent) -> bool:
        if not self.devtools.enabled:
            return False
        self.devtools.cycle_position()
        self._full_redraw = True
        return True

    def _on_log_record(self) -> None:
        if self.devtools.enabled and self._running:
            self.context.rerender()

    def _display_line(self, line: str) -> None:
        logger.info("%s", line)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def save_state(self, path: str | None = None) -> int:
        """Persist component state (for a restart) to *path* or
        ``config.state_path``."""
        target = path or self.config.state_path
        if not target:
            raise StateError("no state path configured")
        tree = self.tree if self.tree is not None else self.build_tree()
        return save_app_state(tree, target)

    def _restore_state(self) -> None:
        path = self.config.state_path
        if not path or not os.path.exists(path):
            return
        tree = self.build_tree()
        try:
            load_app_state(tree, path)
        except StateError:
            logger.exception("ignoring unreadable state file %s", path)
        try:
            os.remove(path)
        except OSError:
            logger.warning("could not remove state file %s", path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def exit(self) -> None:
        self._running = False
        if self._exit_event is not None:
            self._exit_event.set()

    async def run_async(self) -> None:
        """Run until Ctrl+C / Ctrl+D or :meth:`exit`.

        Raises :class:`lotus.tui.errors.TerminalError` if no terminal was
        given and the process is not attached to one.
        """
        self._log_handler = configure_logging(self.config)
        terminal = self._require_terminal()
        loop = asyncio.get_running_loop()
        self.context.loop = loop
        self._exit_event = asyncio.Event()

        if self.config.dev:
            self.devtools.attach(on_record=self._on_log_record)

        self._restore_state()
        terminal.start(self.handle_input, self._on_resize)
        try:
            if self.config.alt_screen:
                terminal.enter_alt_screen()
            terminal.hide_cursor()
            terminal.clear_screen()
            self._running = True
            self._full_redraw = True
            self.render_frame()
            await self._exit_event.wait()
        finally:
            self._running = False
            self.input.clear()
            terminal.show_cursor()
            if self.config.alt_screen:
                terminal.leave_alt_screen()
            terminal.stop()
            self.devtools.detach()
            self.context.loop = None
            self._exit_event = None
            if self._log_handler is not None:
                logging.getLogger("lotus").removeHandler(self._log_handler)
                self._log_handler.close()
                self._log_handler = None

    def run(self) -> None:
        asyncio.run(self.run_async())

    def _require_terminal(self) -> Terminal:
        if self.terminal is None:
            self.terminal = ProcessTerminal()
        return self.terminal


def run(root: Any, **options: Any) -> App:
    """Mount *root* and run it until exit. Returns the finished app."""
    app = App(root, **options)
    app.run()
    return app
