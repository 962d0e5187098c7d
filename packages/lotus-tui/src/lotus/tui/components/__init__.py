"""Built-in components."""

from lotus.tui.components.input import Input
from lotus.tui.components.modal import Modal, ModalButton
from lotus.tui.components.stream import StreamingText
from lotus.tui.components.tabs import Tab, Tabs

__all__ = [
    "Input",
    "Modal",
    "ModalButton",
    "StreamingText",
    "Tab",
    "Tabs",
]
