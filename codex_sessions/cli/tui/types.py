"""Shared TUI types."""

from __future__ import annotations

import curses
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias


class Mode(str, Enum):
    """Browser input modes."""

    NORMAL = "normal"
    FILTERING = "filtering"
    CHORD_PENDING = "chord_pending"
    COMMAND = "command"
    CONFIRM_DELETE = "confirm_delete"


class NotificationLevel(str, Enum):
    """Status message severity levels."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class KeyName(str, Enum):
    """Terminal-independent key identifiers."""

    CHAR = "char"
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    INTERRUPT = "interrupt"
    RESIZE = "resize"


@dataclass(frozen=True)
class Key:
    """A single key press; `char` is set only for `KeyName.CHAR`."""

    name: KeyName
    char: str = ""

    @classmethod
    def of(cls, char: str) -> "Key":
        return cls(KeyName.CHAR, char)

    def is_char(self, char: str) -> bool:
        return self.name is KeyName.CHAR and self.char == char


_SPECIAL_CHARS: dict[str, KeyName] = {
    "\n": KeyName.ENTER,
    "\r": KeyName.ENTER,
    "\x1b": KeyName.ESCAPE,
    "\x7f": KeyName.BACKSPACE,
    "\b": KeyName.BACKSPACE,
    "\x03": KeyName.INTERRUPT,
}

_CURSES_KEYS: dict[int, KeyName] = {
    curses.KEY_UP: KeyName.UP,
    curses.KEY_DOWN: KeyName.DOWN,
    curses.KEY_PPAGE: KeyName.PAGE_UP,
    curses.KEY_NPAGE: KeyName.PAGE_DOWN,
    curses.KEY_HOME: KeyName.HOME,
    curses.KEY_END: KeyName.END,
    curses.KEY_ENTER: KeyName.ENTER,
    curses.KEY_BACKSPACE: KeyName.BACKSPACE,
    curses.KEY_RESIZE: KeyName.RESIZE,
}


def key_from_curses(raw: int | str) -> Key | None:
    """Translate a `get_wch()` result into a `Key`, or None for unhandled input."""
    if isinstance(raw, int):
        name = _CURSES_KEYS.get(raw)
        return Key(name) if name else None
    if raw in _SPECIAL_CHARS:
        return Key(_SPECIAL_CHARS[raw])
    if raw.isprintable():
        return Key.of(raw)
    return None


CursesWindow: TypeAlias = curses.window
