"""Key transitions for the session browser.

`handle_key` mutates `BrowserState` for one key press and returns the side
effects the controller has to run. Nothing here touches the filesystem or the
terminal, so every transition is testable with plain `Key` values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from codex_sessions.cli.tui.commands import HELP_TEXT, CommandError, CommandName, parse_command
from codex_sessions.cli.tui.state import (
    BrowserState,
    PendingChord,
    apply_filter,
    clamp_selection,
    move_selection,
    set_status,
)
from codex_sessions.cli.tui.types import Key, KeyName, Mode, NotificationLevel
from codex_sessions.config.schema import BrowserSettings
from codex_sessions.core.models import Session

logger = logging.getLogger(__name__)

PAGE_STEP = 10
CHORD_HINT = "Press d again to delete the selected session"
NO_SELECTION = "No session selected"
NO_CWD = "No working directory recorded for this session"


class ActionType(str, Enum):
    """Side effects requested by a transition."""

    RESUME = "resume"
    JUMP = "jump"
    DELETE = "delete"
    EXPORT = "export"
    RESCAN = "rescan"
    QUIT = "quit"


@dataclass(frozen=True)
class Action:
    type: ActionType
    session: Session | None = None
    argument: str | None = None


def expire_chord(state: BrowserState, now: float) -> bool:
    """Drop a pending chord whose deadline has passed.

    Returns True when the state changed.
    """
    if state.mode is not Mode.CHORD_PENDING or state.chord is None:
        return False
    if now < state.chord.deadline:
        return False
    _cancel_chord(state)
    return True


def _cancel_chord(state: BrowserState) -> None:
    state.chord = None
    state.mode = Mode.NORMAL
    if state.status is not None and state.status.text == CHORD_HINT:
        state.status = None


def handle_key(state: BrowserState, key: Key, now: float, settings: BrowserSettings) -> list[Action]:
    """Apply one key press to `state`."""
    if key.name is KeyName.RESIZE:
        return []
    if key.name is KeyName.INTERRUPT:
        return [Action(ActionType.QUIT)]

    state.status = None
    mode = state.mode
    if mode is Mode.FILTERING:
        return _handle_filtering(state, key, settings)
    if mode is Mode.COMMAND:
        return _handle_command(state, key)
    if mode is Mode.CONFIRM_DELETE:
        return _handle_confirm(state, key)
    if mode is Mode.CHORD_PENDING:
        return _handle_chord(state, key, now, settings)
    return _handle_normal(state, key, now, settings)


def _handle_normal(state: BrowserState, key: Key, now: float, settings: BrowserSettings) -> list[Action]:
    name = key.name
    if name is KeyName.UP or key.is_char("k"):
        move_selection(state, -1)
    elif name is KeyName.DOWN or key.is_char("j"):
        move_selection(state, 1)
    elif name is KeyName.PAGE_UP:
        move_selection(state, -PAGE_STEP)
    elif name is KeyName.PAGE_DOWN:
        move_selection(state, PAGE_STEP)
    elif name is KeyName.HOME:
        if state.selected_index is not None:
            clamp_selection(state, 0)
    elif name is KeyName.END:
        if state.selected_index is not None:
            clamp_selection(state, len(state.visible) - 1)
    elif name is KeyName.ENTER:
        return _resume_selected(state)
    elif name is KeyName.ESCAPE:
        if state.committed_filter:
            state.committed_filter = ""
            apply_filter(state, "")
    elif key.is_char("/"):
        state.mode = Mode.FILTERING
        state.filter_buffer = ""
        apply_filter(state, "")
    elif key.is_char(":"):
        state.mode = Mode.COMMAND
        state.command_buffer = ""
    elif key.is_char("d"):
        state.mode = Mode.CHORD_PENDING
        state.chord = PendingChord("d", now + settings.chord_timeout_s)
        set_status(state, CHORD_HINT)
    elif key.is_char("r"):
        return [Action(ActionType.RESCAN)]
    elif key.is_char("q"):
        return [Action(ActionType.QUIT)]
    return []


def _handle_chord(state: BrowserState, key: Key, now: float, settings: BrowserSettings) -> list[Action]:
    chord = state.chord
    state.chord = None
    state.mode = Mode.NORMAL
    if chord is not None and now < chord.deadline and key.is_char(chord.key):
        _enter_confirm(state)
        return []
    # Late or different second key: treat it as a fresh key.
    return _handle_normal(state, key, now, settings)


def _enter_confirm(state: BrowserState) -> None:
    selected = state.selected_session
    if selected is None:
        set_status(state, NO_SELECTION, NotificationLevel.WARNING)
        return
    state.delete_target = selected
    state.mode = Mode.CONFIRM_DELETE


def _handle_confirm(state: BrowserState, key: Key) -> list[Action]:
    if key.is_char("y") or key.is_char("Y"):
        target = state.delete_target
        selected = state.selected_session
        state.delete_target = None
        state.mode = Mode.NORMAL
        if target is None or selected is None or selected.path != target.path:
            set_status(state, "Selection changed; delete cancelled", NotificationLevel.WARNING)
            return []
        return [Action(ActionType.DELETE, session=selected)]
    if key.is_char("n") or key.is_char("N") or key.name is KeyName.ESCAPE:
        state.delete_target = None
        state.mode = Mode.NORMAL
        set_status(state, "Delete cancelled")
    return []


def _handle_filtering(state: BrowserState, key: Key, settings: BrowserSettings) -> list[Action]:
    name = key.name
    if name is KeyName.CHAR:
        state.filter_buffer += key.char
        apply_filter(state, state.filter_buffer)
    elif name is KeyName.BACKSPACE:
        if state.filter_buffer:
            state.filter_buffer = state.filter_buffer[:-1]
            apply_filter(state, state.filter_buffer)
    elif name is KeyName.UP:
        move_selection(state, -1)
    elif name is KeyName.DOWN:
        move_selection(state, 1)
    elif name is KeyName.PAGE_UP:
        move_selection(state, -PAGE_STEP)
    elif name is KeyName.PAGE_DOWN:
        move_selection(state, PAGE_STEP)
    elif name is KeyName.ENTER:
        state.committed_filter = state.filter_buffer
        state.filter_buffer = ""
        state.mode = Mode.NORMAL
    elif name is KeyName.ESCAPE:
        state.filter_buffer = ""
        state.mode = Mode.NORMAL
        if settings.filter_cancel == "discard":
            state.committed_filter = ""
        apply_filter(state, state.committed_filter)
    return []


def _handle_command(state: BrowserState, key: Key) -> list[Action]:
    name = key.name
    if name is KeyName.CHAR:
        state.command_buffer += key.char
    elif name is KeyName.BACKSPACE:
        if state.command_buffer:
            state.command_buffer = state.command_buffer[:-1]
        else:
            state.mode = Mode.NORMAL
    elif name is KeyName.ESCAPE:
        state.command_buffer = ""
        state.mode = Mode.NORMAL
    elif name is KeyName.ENTER:
        text = state.command_buffer
        state.command_buffer = ""
        state.mode = Mode.NORMAL
        return _dispatch_command(state, text)
    return []


def _dispatch_command(state: BrowserState, text: str) -> list[Action]:
    try:
        command = parse_command(text)
    except CommandError as exc:
        set_status(state, str(exc), NotificationLevel.ERROR)
        return []
    if command is None:
        return []

    logger.debug("Command %s %s", command.name.value, command.argument or "")
    if command.name is CommandName.QUIT:
        return [Action(ActionType.QUIT)]
    if command.name is CommandName.REFRESH:
        return [Action(ActionType.RESCAN)]
    if command.name is CommandName.HELP:
        set_status(state, HELP_TEXT)
        return []
    if command.name is CommandName.RESUME:
        return _resume_selected(state)
    if command.name is CommandName.JUMP:
        return _jump_selected(state)
    if command.name is CommandName.DELETE:
        _enter_confirm(state)
        return []

    selected = state.selected_session
    if selected is None:
        set_status(state, NO_SELECTION, NotificationLevel.WARNING)
        return []
    return [Action(ActionType.EXPORT, session=selected, argument=command.argument)]


def _resume_selected(state: BrowserState) -> list[Action]:
    selected = state.selected_session
    if selected is None:
        set_status(state, NO_SELECTION, NotificationLevel.WARNING)
        return []
    return [Action(ActionType.RESUME, session=selected)]


def _jump_selected(state: BrowserState) -> list[Action]:
    selected = state.selected_session
    if selected is None:
        set_status(state, NO_SELECTION, NotificationLevel.WARNING)
        return []
    if not selected.cwd:
        set_status(state, NO_CWD, NotificationLevel.WARNING)
        return []
    return [Action(ActionType.JUMP, session=selected)]
