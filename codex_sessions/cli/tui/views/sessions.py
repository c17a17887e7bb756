"""Session list view with transcript preview."""

from __future__ import annotations

import curses
from dataclasses import dataclass
from enum import Enum

from codex_sessions.cli.tui import theme
from codex_sessions.cli.tui.state import BrowserState
from codex_sessions.cli.tui.types import CursesWindow, Mode, NotificationLevel
from codex_sessions.cli.tui.utils.formatters import format_relative_time, shorten_path, truncate_text
from codex_sessions.cli.tui.views.base import BaseView
from codex_sessions.core.models import Session

TITLE = "codex-sessions"
HINTS = "enter resume  / filter  dd delete  : command  r refresh  q quit"
HEADER = f"{'UPDATED':<8}{'BRANCH':<16}{'CWD':<30}PREVIEW"
EMPTY_STORE = "No Codex sessions recorded yet"
NO_MATCHES = "No sessions match the filter"

# Rows used by the title, prompt, header and status lines.
_CHROME_ROWS = 4


class Style(str, Enum):
    TITLE = "title"
    PROMPT = "prompt"
    HEADER = "header"
    ROW = "row"
    SELECTED = "selected"
    MUTED = "muted"
    SEPARATOR = "separator"
    PREVIEW = "preview"
    BOX = "box"
    STATUS = "status"


@dataclass(frozen=True)
class _Line:
    text: str
    style: Style = Style.ROW


def format_session_row(session: Session, width: int) -> str:
    """One list row: age, branch, shortened cwd and preview."""
    updated = format_relative_time(session.modified_at)
    branch = truncate_text(session.git_branch or "-", 15)
    cwd = shorten_path(session.cwd or "-", 29)
    preview = session.preview or f"({session.session_id[:8]})"
    line = f"{updated:<8}{branch:<16}{cwd:<30}{preview}"
    return line[:width]


class SessionsView(BaseView):
    """Renders `BrowserState`: list on top, preview of the selection below."""

    def __init__(self, state: BrowserState) -> None:
        self.state = state
        self.scroll_offset = 0

    def get_render_lines(self, width: int, height: int) -> list[str]:
        return [line.text[:width] for line in self._layout(width, height)]

    def render(self, stdscr: CursesWindow) -> None:
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        for row, line in enumerate(self._layout(width, height)):
            attr = self._attr(line)
            # Writing the bottom-right cell raises, so stop one short.
            text = line.text[: max(0, width - 1)]
            if line.style in (Style.SELECTED, Style.BOX):
                text = text.ljust(max(0, width - 1))
            try:
                stdscr.addstr(row, 0, text, attr)
            except curses.error:
                pass
        stdscr.refresh()

    def _attr(self, line: _Line) -> int:
        style = line.style
        if style is Style.TITLE:
            return theme.title_attr()
        if style is Style.HEADER:
            return curses.A_BOLD
        if style is Style.SELECTED:
            return curses.A_REVERSE
        if style in (Style.MUTED, Style.SEPARATOR):
            return theme.muted_attr()
        if style is Style.BOX:
            return theme.box_attr()
        if style is Style.STATUS:
            status = self.state.status
            return theme.status_attr(status.level if status else NotificationLevel.INFO)
        return curses.A_NORMAL

    def _layout(self, width: int, height: int) -> list[_Line]:
        state = self.state
        body = max(0, height - _CHROME_ROWS)
        list_height = max(1, body * 2 // 5) if body else 0
        preview_height = max(0, body - list_height - 1)

        lines = [_Line(f"{TITLE}  {HINTS}", Style.TITLE), self._prompt_line(), _Line(HEADER, Style.HEADER)]

        list_lines = self._list_lines(width, list_height)
        if state.mode is Mode.CONFIRM_DELETE and state.delete_target is not None:
            list_lines = self._overlay_confirm(list_lines, width)
        lines.extend(list_lines)

        if body:
            lines.append(self._separator(width))
            preview = self._preview_lines(preview_height)
            lines.extend(preview)
            lines.extend(_Line("", Style.PREVIEW) for _ in range(preview_height - len(preview)))

        status = state.status.text if state.status else ""
        lines.append(_Line(status, Style.STATUS))
        return lines[:height] if height > 0 else []

    def _prompt_line(self) -> _Line:
        state = self.state
        if state.mode is Mode.FILTERING:
            return _Line(f"/{state.filter_buffer}", Style.PROMPT)
        if state.mode is Mode.COMMAND:
            return _Line(f":{state.command_buffer}", Style.PROMPT)
        text = f"{len(state.visible)} of {len(state.sessions)} sessions"
        if state.committed_filter:
            text += f"  filter: {state.committed_filter}"
        if state.scanning:
            text += "  (refreshing)"
        return _Line(text, Style.MUTED)

    def _list_lines(self, width: int, height: int) -> list[_Line]:
        state = self.state
        if height <= 0:
            return []
        if not state.visible:
            message = NO_MATCHES if state.sessions else EMPTY_STORE
            return [_Line(f"  {message}", Style.MUTED)] + [_Line("") for _ in range(height - 1)]

        self.scroll_to(state.selected_index or 0, height, len(state.visible))

        lines: list[_Line] = []
        window = state.visible[self.scroll_offset : self.scroll_offset + height]
        for offset, session in enumerate(window):
            index = self.scroll_offset + offset
            style = Style.SELECTED if index == state.selected_index else Style.ROW
            lines.append(_Line(format_session_row(session, width), style))
        lines.extend(_Line("") for _ in range(height - len(lines)))
        return lines

    def _overlay_confirm(self, lines: list[_Line], width: int) -> list[_Line]:
        target = self.state.delete_target
        if target is None:
            return lines
        box = [
            f" Delete session {target.session_id}? ",
            f" {shorten_path(str(target.path), max(10, width - 4))} ",
            " y = delete   n / Esc = cancel ",
        ]
        start = max(0, (len(lines) - len(box)) // 2)
        merged = list(lines)
        for offset, text in enumerate(box):
            row = start + offset
            if row < len(merged):
                merged[row] = _Line(text, Style.BOX)
            else:
                merged.append(_Line(text, Style.BOX))
        return merged

    def _separator(self, width: int) -> _Line:
        selected = self.state.selected_session
        label = ""
        if selected is not None:
            label = f" {selected.session_id} "
            if selected.entry_count is not None:
                label += f"· {selected.entry_count} entries "
        return _Line(("──" + label).ljust(width, "─"), Style.SEPARATOR)

    def _preview_lines(self, height: int) -> list[_Line]:
        state = self.state
        selected = state.selected_session
        if selected is None or height <= 0:
            return []
        preview = state.preview
        if preview is None or preview.path != selected.path:
            return [_Line("  Loading transcript…", Style.MUTED)]
        if not preview.lines:
            return [_Line("  (empty session)", Style.MUTED)]
        lines = [_Line(text, Style.PREVIEW) for text in preview.lines[:height]]
        if preview.diagnostics and len(lines) < height:
            lines.append(_Line(f"  ({preview.diagnostics} malformed lines skipped)", Style.MUTED))
        return lines
