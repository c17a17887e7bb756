"""Main loop of the interactive session browser."""

from __future__ import annotations

import curses
import logging

from codex_sessions.cli.tui.controller import BrowserController
from codex_sessions.cli.tui.theme import init_colors
from codex_sessions.cli.tui.types import CursesWindow, key_from_curses
from codex_sessions.cli.tui.views.sessions import SessionsView
from codex_sessions.constants import KEY_POLL_INTERVAL_MS

logger = logging.getLogger(__name__)


class BrowserApp:
    """Curses front end: reads keys, feeds the controller, draws the view."""

    def __init__(self, controller: BrowserController) -> None:
        self.controller = controller
        self.view = SessionsView(controller.state)

    def run(self, stdscr: CursesWindow) -> None:
        """Run until the controller stops. Called through `curses.wrapper`."""
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        stdscr.keypad(True)
        curses.set_escdelay(25)
        init_colors()
        # Poll so chord deadlines and worker results are handled without input.
        stdscr.timeout(KEY_POLL_INTERVAL_MS)

        self.controller.worker.start()
        try:
            self._loop(stdscr)
        finally:
            self.controller.worker.stop()
        logger.debug("Browser closed")

    def _loop(self, stdscr: CursesWindow) -> None:
        controller = self.controller
        while controller.running:
            controller.tick()
            self.view.render(stdscr)
            try:
                raw = stdscr.get_wch()
            except curses.error:
                continue
            except KeyboardInterrupt:
                controller.running = False
                break
            key = key_from_curses(raw)
            if key is not None:
                controller.handle_key(key)
