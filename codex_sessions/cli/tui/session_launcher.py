"""Shared helpers for handing the terminal to a child process."""

from __future__ import annotations

import curses
from collections.abc import Iterator
from contextlib import contextmanager


@contextmanager
def suspended_screen(stdscr: object) -> Iterator[None]:
    """Leave curses mode for the duration of the block, then restore it."""
    curses.def_prog_mode()
    curses.endwin()
    try:
        yield
    finally:
        curses.reset_prog_mode()
        stdscr.refresh()  # type: ignore[attr-defined]
