"""Browser state model and reducer.

`BrowserState` is only mutated on the UI thread: by key transitions
(`machine.handle_key`) and by data intents applied through `reduce_state`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypedDict, cast

from codex_sessions.cli.tui.types import Mode, NotificationLevel
from codex_sessions.core.filtering import filter_sessions
from codex_sessions.core.models import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingChord:
    """First key of a chord and the monotonic deadline for the second."""

    key: str
    deadline: float


@dataclass(frozen=True)
class StatusMessage:
    """One-line result of the last operation."""

    text: str
    level: NotificationLevel = NotificationLevel.INFO


@dataclass(frozen=True)
class PreviewState:
    """Rendered transcript of one session for the preview pane."""

    path: Path
    lines: list[str]
    diagnostics: int = 0


@dataclass
class BrowserState:
    """Everything the browser renders."""

    sessions: list[Session] = field(default_factory=list)
    visible: list[Session] = field(default_factory=list)
    selected_index: int | None = None
    mode: Mode = Mode.NORMAL
    filter_buffer: str = ""
    committed_filter: str = ""
    command_buffer: str = ""
    status: StatusMessage | None = None
    chord: PendingChord | None = None
    delete_target: Session | None = None
    preview: PreviewState | None = None
    scanning: bool = False

    @property
    def selected_session(self) -> Session | None:
        if self.selected_index is None:
            return None
        return self.visible[self.selected_index]

    @property
    def active_query(self) -> str:
        """Query currently applied to the visible list."""
        return self.filter_buffer if self.mode is Mode.FILTERING else self.committed_filter


def clamp_selection(state: BrowserState, index: int | None) -> None:
    """Set the selection to `index` clamped to the visible range."""
    if not state.visible:
        state.selected_index = None
        return
    state.selected_index = min(max(index or 0, 0), len(state.visible) - 1)


def apply_filter(state: BrowserState, query: str) -> None:
    """Recompute the visible list for `query`.

    The selected session stays selected when it remains visible; otherwise
    the previous index is clamped to the new range.
    """
    previous = state.selected_session
    previous_index = state.selected_index
    state.visible = filter_sessions(state.sessions, query)
    if previous is not None:
        for index, session in enumerate(state.visible):
            if session.path == previous.path:
                state.selected_index = index
                return
    clamp_selection(state, previous_index)


def move_selection(state: BrowserState, delta: int) -> None:
    """Move the selection by `delta` rows; no-op when nothing is visible."""
    if state.selected_index is None:
        return
    clamp_selection(state, state.selected_index + delta)


def set_status(state: BrowserState, text: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
    state.status = StatusMessage(text, level)


class IntentType(str, Enum):
    """Intent identifiers for data-driven state updates."""

    SYNC_SESSIONS = "sync_sessions"
    REMOVE_SESSION = "remove_session"
    SET_STATUS = "set_status"
    CLEAR_STATUS = "clear_status"
    SET_PREVIEW = "set_preview"
    SET_SCANNING = "set_scanning"


class IntentPayload(TypedDict, total=False):
    sessions: list[Session]
    session: Session
    text: str
    level: NotificationLevel
    preview: PreviewState
    scanning: bool


@dataclass(frozen=True)
class Intent:
    """State transition request."""

    type: IntentType
    payload: IntentPayload = field(default_factory=lambda: cast(IntentPayload, {}))


def reduce_state(state: BrowserState, intent: Intent) -> None:
    """Apply intent to state (pure state mutation only)."""
    t = intent.type
    p = intent.payload

    if t is IntentType.SYNC_SESSIONS:
        sessions = p.get("sessions", [])
        # Entry counts and the preview survive a rescan only for files that did not change.
        previous = {s.path: s for s in state.sessions}
        changed: set[Path] = set()
        for session in sessions:
            old = previous.get(session.path)
            if old is None:
                continue
            if old.modified_at != session.modified_at:
                changed.add(session.path)
            elif session.entry_count is None:
                session.entry_count = old.entry_count
        if state.preview is not None and state.preview.path in changed:
            state.preview = None
        state.sessions = list(sessions)
        apply_filter(state, state.active_query)
        target = state.delete_target
        if target is not None and all(s.path != target.path for s in state.sessions):
            state.delete_target = None
            if state.mode is Mode.CONFIRM_DELETE:
                state.mode = Mode.NORMAL
        state.scanning = False
        return

    if t is IntentType.REMOVE_SESSION:
        target = p.get("session")
        if target is None:
            return
        previous_index = state.selected_index
        state.sessions = [s for s in state.sessions if s.path != target.path]
        state.visible = [s for s in state.visible if s.path != target.path]
        clamp_selection(state, previous_index)
        if state.preview and state.preview.path == target.path:
            state.preview = None
        return

    if t is IntentType.SET_STATUS:
        set_status(state, p.get("text", ""), p.get("level", NotificationLevel.INFO))
        return

    if t is IntentType.CLEAR_STATUS:
        state.status = None
        return

    if t is IntentType.SET_PREVIEW:
        preview = p.get("preview")
        # Drop previews for sessions that are no longer selected.
        selected = state.selected_session
        if preview is not None and selected is not None and selected.path == preview.path:
            state.preview = preview
        return

    if t is IntentType.SET_SCANNING:
        state.scanning = bool(p.get("scanning", False))
        return

    logger.debug("Unhandled intent %s", t)
