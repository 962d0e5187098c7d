"""lotus-tui: reactive terminal UI runtime with differential rendering."""

# Runtime
from lotus.tui.app import App, run

# Commands
from lotus.tui.commands import Command, CommandRegistry

# Component protocols
from lotus.tui.component import (
    Capabilities,
    Component,
    Focusable,
    KeyHandler,
    Modal as ModalCapability,
    PropsUpdater,
    Stateful,
    capabilities,
    component_id,
)

# Components
from lotus.tui.components import Input, Modal, ModalButton, StreamingText, Tab, Tabs

# Configuration
from lotus.tui.config import RuntimeConfig, configure_logging
from lotus.tui.context import Context

# DevTools
from lotus.tui.devtools import DevTools, DevToolsHandler, wrap_with_devtools

# Elements
from lotus.tui.element import (
    Element,
    ElementKind,
    box,
    error_text,
    hstack,
    mount,
    text,
    to_element,
    vstack,
)

# Errors
from lotus.tui.errors import LotusError, StateError, TerminalError

# Event routing
from lotus.tui.events import EventRouter
from lotus.tui.focus import FocusManager
from lotus.tui.keybindings import KeyBinding, KeyBindingRegistry, ignore_context

# Keys
from lotus.tui.input_buffer import InputBuffer
from lotus.tui.keys import KeyEvent, parse_keys

# Layout and styles
from lotus.tui.layout import LayoutBox, compute, find_scroll_region

# Markdown
from lotus.tui.markdown import Markdown, markdown
from lotus.tui.reconciler import ComponentCache, Reconciler

# Rendering
from lotus.tui.render import Buffer, Cell, DiffRenderer, DiffResult, DiffRun, Painter, Style, compute_diff
from lotus.tui.scroll import ScrollManager, ScrollState

# State persistence
from lotus.tui.state import load_app_state, save_app_state
from lotus.tui.style import ComputedStyle, StyledNode, resolve

# Terminal
from lotus.tui.terminal import ProcessTerminal, Terminal

__all__ = [
    # Runtime
    "App",
    "run",
    "Context",
    "RuntimeConfig",
    "configure_logging",
    # Commands
    "Command",
    "CommandRegistry",
    # Component protocols
    "Capabilities",
    "Component",
    "Focusable",
    "KeyHandler",
    "ModalCapability",
    "PropsUpdater",
    "Stateful",
    "capabilities",
    "component_id",
    # Components
    "Input",
    "Markdown",
    "Modal",
    "ModalButton",
    "StreamingText",
    "Tab",
    "Tabs",
    "markdown",
    # DevTools
    "DevTools",
    "DevToolsHandler",
    "wrap_with_devtools",
    # Elements
    "Element",
    "ElementKind",
    "box",
    "error_text",
    "hstack",
    "mount",
    "text",
    "to_element",
    "vstack",
    # Errors
    "LotusError",
    "StateError",
    "TerminalError",
    # Events and focus
    "EventRouter",
    "FocusManager",
    "InputBuffer",
    "KeyBinding",
    "KeyBindingRegistry",
    "KeyEvent",
    "ignore_context",
    "parse_keys",
    # Reconciliation
    "ComponentCache",
    "Reconciler",
    # Layout and styles
    "ComputedStyle",
    "LayoutBox",
    "StyledNode",
    "compute",
    "find_scroll_region",
    "resolve",
    # Rendering
    "Buffer",
    "Cell",
    "DiffRenderer",
    "DiffResult",
    "DiffRun",
    "Painter",
    "Style",
    "compute_diff",
    # Scroll and state
    "ScrollManager",
    "ScrollState",
    "load_app_state",
    "save_app_state",
    # Terminal
    "ProcessTerminal",
    "Terminal",
]
