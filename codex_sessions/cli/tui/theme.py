"""Colors and styling for the browser."""

from __future__ import annotations

import curses

from codex_sessions.cli.tui.types import NotificationLevel

# Color pair IDs (initialized after curses.start_color())
_PAIR_ERROR = 1
_PAIR_SUCCESS = 2
_PAIR_WARNING = 3
_PAIR_ACCENT = 4
_PAIR_MUTED = 5

_colors_enabled = False


def init_colors() -> None:
    """Initialize color pairs; leaves styling monochrome when unsupported."""
    global _colors_enabled  # noqa: PLW0603
    if not curses.has_colors():
        return
    curses.start_color()
    try:
        curses.use_default_colors()
        background = -1
    except curses.error:
        background = curses.COLOR_BLACK
    extended = curses.COLORS >= 256
    curses.init_pair(_PAIR_ERROR, curses.COLOR_RED, background)
    curses.init_pair(_PAIR_SUCCESS, curses.COLOR_GREEN, background)
    curses.init_pair(_PAIR_WARNING, curses.COLOR_YELLOW, background)
    # Steel blue accent on 256-color terminals
    curses.init_pair(_PAIR_ACCENT, 110 if extended else curses.COLOR_CYAN, background)
    curses.init_pair(_PAIR_MUTED, 245 if extended else curses.COLOR_WHITE, background)
    _colors_enabled = True


def _pair(pair_id: int) -> int:
    return curses.color_pair(pair_id) if _colors_enabled else 0


def status_attr(level: NotificationLevel) -> int:
    if level is NotificationLevel.ERROR:
        return _pair(_PAIR_ERROR) | curses.A_BOLD
    if level is NotificationLevel.WARNING:
        return _pair(_PAIR_WARNING)
    if level is NotificationLevel.SUCCESS:
        return _pair(_PAIR_SUCCESS)
    return curses.A_NORMAL


def title_attr() -> int:
    return _pair(_PAIR_ACCENT) | curses.A_BOLD


def muted_attr() -> int:
    return _pair(_PAIR_MUTED) | curses.A_DIM


def box_attr() -> int:
    return _pair(_PAIR_ERROR) | curses.A_BOLD
