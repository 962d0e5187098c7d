"""Keyboard input decoding.

Raw terminal input is split into :class:`KeyEvent` values. A key event is
either a single byte (control keys, ``key``), printable text (``char``) or an
escape sequence for a special key (``code``). Legacy SS3 variants of the
arrow/home/end keys are normalised to their CSI form so that handlers only
have to compare against one constant.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Byte values
# ---------------------------------------------------------------------------

KEY_CTRL_C = 3
KEY_CTRL_D = 4
KEY_BACKSPACE_LEGACY = 8
KEY_TAB = 9
KEY_LINE_FEED = 10
KEY_ENTER = 13
KEY_ESCAPE = 27
KEY_BACKSPACE = 127

# ---------------------------------------------------------------------------
# Escape sequences
# ---------------------------------------------------------------------------

SEQ_UP = "\x1b[A"
SEQ_DOWN = "\x1b[B"
SEQ_RIGHT = "\x1b[C"
SEQ_LEFT = "\x1b[D"
SEQ_HOME = "\x1b[H"
SEQ_END = "\x1b[F"
SEQ_INSERT = "\x1b[2~"
SEQ_DELETE = "\x1b[3~"
SEQ_PAGE_UP = "\x1b[5~"
SEQ_PAGE_DOWN = "\x1b[6~"
SEQ_SHIFT_TAB = "\x1b[Z"
SEQ_SHIFT_ENTER = "\x1b[13;2u"
SEQ_CTRL_LEFT = "\x1b[1;5D"
SEQ_CTRL_RIGHT = "\x1b[1;5C"
SEQ_ALT_LEFT = "\x1b[1;3D"
SEQ_ALT_RIGHT = "\x1b[1;3C"
SEQ_ALT_BACKSPACE = "\x1b\x7f"
SEQ_F1 = "\x1bOP"
SEQ_F2 = "\x1bOQ"
SEQ_F3 = "\x1bOR"
SEQ_F4 = "\x1bOS"

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

# SS3 forms some terminals send in application-cursor mode
_SS3_ALIASES: dict[str, str] = {
    "\x1bOA": SEQ_UP,
    "\x1bOB": SEQ_DOWN,
    "\x1bOC": SEQ_RIGHT,
    "\x1bOD": SEQ_LEFT,
    "\x1bOH": SEQ_HOME,
    "\x1bOF": SEQ_END,
    "\x1b[1~": SEQ_HOME,
    "\x1b[4~": SEQ_END,
    "\x1b[7~": SEQ_HOME,
    "\x1b[8~": SEQ_END,
}

_CODE_NAMES: dict[str, str] = {
    SEQ_UP: "up",
    SEQ_DOWN: "down",
    SEQ_RIGHT: "right",
    SEQ_LEFT: "left",
    SEQ_HOME: "home",
    SEQ_END: "end",
    SEQ_INSERT: "insert",
    SEQ_DELETE: "delete",
    SEQ_PAGE_UP: "pageUp",
    SEQ_PAGE_DOWN: "pageDown",
    SEQ_SHIFT_TAB: "shift+tab",
    SEQ_SHIFT_ENTER: "shift+enter",
    SEQ_CTRL_LEFT: "ctrl+left",
    SEQ_CTRL_RIGHT: "ctrl+right",
    SEQ_ALT_LEFT: "alt+left",
    SEQ_ALT_RIGHT: "alt+right",
    SEQ_ALT_BACKSPACE: "alt+backspace",
    SEQ_F1: "f1",
    SEQ_F2: "f2",
    SEQ_F3: "f3",
    SEQ_F4: "f4",
}

ARROW_CODES = frozenset({SEQ_UP, SEQ_DOWN, SEQ_LEFT, SEQ_RIGHT})


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """One decoded keystroke (or one bracketed paste)."""

    key: int = 0
    char: str = ""
    code: str = ""
    paste: bool = False

    @classmethod
    def from_char(cls, char: str) -> KeyEvent:
        return cls(key=ord(char) if len(char) == 1 and ord(char) < 256 else 0, char=char)

    @classmethod
    def ctrl(cls, letter: str) -> KeyEvent:
        """Build the event a terminal sends for ``Ctrl+<letter>``."""
        return cls(key=ctrl_code(letter))

    @classmethod
    def from_code(cls, code: str) -> KeyEvent:
        return cls(code=code)

    def is_ctrl_c(self) -> bool:
        return self.key == KEY_CTRL_C and not self.char and not self.code

    def is_ctrl_d(self) -> bool:
        return self.key == KEY_CTRL_D and not self.char and not self.code

    def is_enter(self) -> bool:
        return not self.code and not self.char and self.key in (KEY_ENTER, KEY_LINE_FEED)

    def is_tab(self) -> bool:
        return not self.code and not self.char and self.key == KEY_TAB

    def is_shift_tab(self) -> bool:
        return self.code == SEQ_SHIFT_TAB

    def is_escape(self) -> bool:
        return not self.code and not self.char and self.key == KEY_ESCAPE

    def is_backspace(self) -> bool:
        return not self.code and self.key in (KEY_BACKSPACE, KEY_BACKSPACE_LEGACY)

    def is_arrow(self) -> bool:
        return self.code in ARROW_CODES

    def is_printable(self) -> bool:
        return bool(self.char) and not self.code

    def ctrl_letter(self) -> str | None:
        """Return ``"a"``..``"z"`` when this is a Ctrl+letter byte."""
        if self.code or self.char:
            return None
        if self.key in (KEY_TAB, KEY_LINE_FEED, KEY_ENTER, KEY_BACKSPACE_LEGACY):
            return None
        if 1 <= self.key <= 26:
            return chr(ord("a") + self.key - 1)
        return None

    @property
    def name(self) -> str:
        """Human-readable name such as ``"ctrl+o"``, ``"up"`` or ``"a"``."""
        if self.paste:
            return "paste"
        if self.code:
            if self.code in _CODE_NAMES:
                return _CODE_NAMES[self.code]
            if len(self.code) == 2 and self.code[0] == "\x1b":
                return f"alt+{self.code[1]}"
            return repr(self.code)
        if self.char:
            return "space" if self.char == " " else self.char
        if self.key in (KEY_ENTER, KEY_LINE_FEED):
            return "enter"
        if self.key == KEY_TAB:
            return "tab"
        if self.key == KEY_ESCAPE:
            return "escape"
        if self.key in (KEY_BACKSPACE, KEY_BACKSPACE_LEGACY):
            return "backspace"
        letter = self.ctrl_letter()
        if letter is not None:
            return f"ctrl+{letter}"
        return f"0x{self.key:02x}"


def ctrl_code(letter: str) -> int:
    """Map ``"a"``/``"A"`` .. ``"z"`` to the control byte 1..26."""
    if len(letter) != 1 or not letter.isalpha() or not letter.isascii():
        raise ValueError(f"not a Ctrl+letter key: {letter!r}")
    return ord(letter.lower()) - ord("a") + 1


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _csi_end(data: str, start: int) -> int:
    """Return the index just past the CSI sequence starting at ``data[start]``.

    ``start`` points at the ESC. A CSI ends with a final byte in 0x40..0x7E.
    Returns ``len(data)`` for a truncated sequence.
    """
    i = start + 2
    while i < len(data):
        if 0x40 <= ord(data[i]) <= 0x7E:
            return i + 1
        i += 1
    return len(data)


def split_sequences(data: str) -> list[str]:
    """Split a chunk of raw input into individual key sequences.

    Bracketed paste blocks are kept whole (markers included).
    """
    parts: list[str] = []
    i = 0
    n = len(data)
    while i < n:
        ch = data[i]
        if ch != "\x1b":
            parts.append(ch)
            i += 1
            continue

        if data.startswith(PASTE_START, i):
            end = data.find(PASTE_END, i + len(PASTE_START))
            stop = n if end == -1 else end + len(PASTE_END)
            parts.append(data[i:stop])
            i = stop
            continue

        if i + 1 >= n:
            parts.append(ch)
            i += 1
            continue

        nxt = data[i + 1]
        if nxt == "[":
            stop = _csi_end(data, i)
        elif nxt == "O":
            stop = min(n, i + 3)
        elif nxt == "\x1b":
            # Double escape: the first one is a lone Escape key
            stop = i + 1
        else:
            stop = i + 2
        parts.append(data[i:stop])
        i = stop
    return parts


def is_partial(seq: str) -> bool:
    """True when *seq* may be the start of a longer sequence still in flight."""
    if seq == "\x1b":
        return True
    if seq.startswith(PASTE_START):
        return not seq.endswith(PASTE_END)
    if seq.startswith("\x1b["):
        return len(seq) < 3 or not 0x40 <= ord(seq[-1]) <= 0x7E
    if seq.startswith("\x1bO"):
        return len(seq) < 3
    return False


def split_complete(data: str) -> tuple[list[str], str]:
    """Split *data* like :func:`split_sequences`, holding back a trailing
    fragment that needs more input. Returns ``(sequences, remainder)``."""
    parts = split_sequences(data)
    # only the last part can run off the end of the data
    if parts and is_partial(parts[-1]):
        return parts[:-1], parts[-1]
    return parts, ""


def parse_sequence(seq: str) -> KeyEvent:
    """Decode one sequence produced by :func:`split_sequences`."""
    if seq.startswith(PASTE_START):
        body = seq[len(PASTE_START):]
        if body.endswith(PASTE_END):
            body = body[: -len(PASTE_END)]
        return KeyEvent(char=body, paste=True)

    if len(seq) == 1:
        code = ord(seq)
        if code < 32 or code == KEY_BACKSPACE:
            return KeyEvent(key=code)
        return KeyEvent.from_char(seq)

    if seq.startswith("\x1b"):
        return KeyEvent(code=_SS3_ALIASES.get(seq, seq))

    # Multi-codepoint text (e.g. an emoji sequence) arrives as one string
    return KeyEvent(char=seq)


def parse_keys(data: str) -> list[KeyEvent]:
    """Decode a chunk of raw terminal input into key events."""
    return [parse_sequence(seq) for seq in split_sequences(data)]
