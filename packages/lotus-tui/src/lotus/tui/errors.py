"""Exception types raised by the lotus runtime."""

from __future__ import annotations


class LotusError(Exception):
    """Base class for all lotus runtime errors."""


class TerminalError(LotusError):
    """The terminal driver could not be acquired (e.g. stdin is not a TTY).

    This is the only fatal condition of the runtime: it is raised from
    :meth:`lotus.tui.app.App.run` before the first frame and never recovered.
    """


class StateError(LotusError):
    """A persisted component-state file exists but could not be decoded."""
