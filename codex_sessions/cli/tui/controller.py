"""Browser controller: runs the side effects of key transitions.

Key handling mutates state through `machine.handle_key`; data arriving from
the store goes through `reduce_state` intents. Deletion and export run
synchronously inside the key press that requested them.
"""

from __future__ import annotations

import logging
import time
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path
from typing import Callable

from codex_sessions.cli.tui.machine import Action, ActionType, expire_chord, handle_key
from codex_sessions.cli.tui.messages import PreviewFailed, PreviewLoaded, ScanFailed, ScanFinished, WorkerMessage
from codex_sessions.cli.tui.state import BrowserState, Intent, IntentType, PreviewState, reduce_state
from codex_sessions.cli.tui.types import Key, NotificationLevel
from codex_sessions.cli.tui.worker import BackgroundWorker
from codex_sessions.config.schema import BrowserSettings
from codex_sessions.core.errors import DeleteError, ExportError, LaunchError
from codex_sessions.core.export import ExportFormat, ExportResult, export_session
from codex_sessions.core.launcher import ResumeLauncher
from codex_sessions.core.models import Session
from codex_sessions.core.scanner import ScanResult
from codex_sessions.core.store import SessionStore

logger = logging.getLogger(__name__)


class BrowserController:
    """Central controller for browser state and store side effects."""

    def __init__(
        self,
        state: BrowserState,
        store: SessionStore,
        settings: BrowserSettings,
        launcher: ResumeLauncher,
        *,
        worker: BackgroundWorker,
        clock: Callable[[], float] = time.monotonic,
        suspend: Callable[[], AbstractContextManager[None]] | None = None,
    ) -> None:
        self.state = state
        self.store = store
        self.settings = settings
        self.launcher = launcher
        self.worker = worker
        self._clock = clock
        self._suspend = suspend or nullcontext
        self._requested_preview: Path | None = None
        self.running = True

    def dispatch(self, intent: Intent) -> None:
        reduce_state(self.state, intent)

    def load(self, result: ScanResult) -> None:
        """Install a scan result as the session list."""
        self.dispatch(Intent(IntentType.SYNC_SESSIONS, {"sessions": result.sessions}))
        if result.warnings:
            self._status(f"Skipped {len(result.warnings)} unreadable file(s)", NotificationLevel.WARNING)

    def handle_key(self, key: Key) -> None:
        for action in handle_key(self.state, key, self._clock(), self.settings):
            self._execute(action)

    def tick(self) -> None:
        """Per-iteration housekeeping for the UI loop."""
        expire_chord(self.state, self._clock())
        for message in self.worker.poll():
            self._apply_message(message)
        self._request_preview()

    # Worker results

    def _apply_message(self, message: WorkerMessage) -> None:
        if isinstance(message, ScanFinished):
            self.load(message.result)
        elif isinstance(message, ScanFailed):
            self.dispatch(Intent(IntentType.SET_SCANNING, {"scanning": False}))
            self._status(message.error, NotificationLevel.ERROR)
        elif isinstance(message, PreviewLoaded):
            for session in self.state.sessions:
                if session.path == message.path:
                    session.entry_count = message.entry_count
            preview = PreviewState(message.path, message.lines, message.diagnostics)
            self.dispatch(Intent(IntentType.SET_PREVIEW, {"preview": preview}))
        elif isinstance(message, PreviewFailed):
            preview = PreviewState(message.path, [f"Cannot read session: {message.error}"])
            self.dispatch(Intent(IntentType.SET_PREVIEW, {"preview": preview}))

    def _request_preview(self) -> None:
        selected = self.state.selected_session
        if selected is None:
            return
        if self.state.preview is not None and self.state.preview.path == selected.path:
            return
        if self._requested_preview == selected.path:
            return
        self._requested_preview = selected.path
        self.worker.submit_preview(selected)

    # Actions

    def _execute(self, action: Action) -> None:
        logger.debug("Action %s", action.type.value)
        if action.type is ActionType.QUIT:
            self.running = False
        elif action.type is ActionType.RESCAN:
            self.rescan()
        elif action.session is None:
            logger.debug("Dropped %s without a session", action.type.value)
        elif action.type is ActionType.DELETE:
            self._delete(action.session)
        elif action.type is ActionType.EXPORT:
            self._export(action.session, action.argument or "")
        elif action.type is ActionType.RESUME:
            self._resume(action.session)
        elif action.type is ActionType.JUMP:
            self._resume(action.session, cwd=action.session.cwd)

    def rescan(self) -> None:
        self.dispatch(Intent(IntentType.SET_SCANNING, {"scanning": True}))
        self._status("Refreshing sessions")
        self._requested_preview = None
        self.worker.submit_scan()

    def _delete(self, session: Session) -> None:
        try:
            removed = self.store.delete(session)
        except DeleteError as exc:
            self._status(str(exc), NotificationLevel.ERROR)
            return
        self.dispatch(Intent(IntentType.REMOVE_SESSION, {"session": session}))
        if self._requested_preview == session.path:
            self._requested_preview = None
        if removed:
            self._status(f"Deleted session {session.session_id}", NotificationLevel.SUCCESS)
        else:
            self._status(f"Session {session.session_id} was already removed", NotificationLevel.WARNING)

    def _export(self, session: Session, target: str) -> None:
        destination = Path(target).expanduser()
        try:
            result = export_session(session.path, destination, width=self.settings.display_width)
        except ExportError as exc:
            self._status(f"Export failed: {exc}", NotificationLevel.ERROR)
            return
        self._status(describe_export(result), NotificationLevel.SUCCESS)

    def _resume(self, session: Session, cwd: str | None = None) -> None:
        try:
            with self._suspend():
                self.launcher.resume(session.session_id, cwd=cwd)
        except LaunchError as exc:
            self._status(f"Resume failed: {exc}", NotificationLevel.ERROR)
            return
        self.rescan()
        self._status(f"Resumed session {session.session_id}", NotificationLevel.SUCCESS)

    def _status(self, text: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        self.dispatch(Intent(IntentType.SET_STATUS, {"text": text, "level": level}))


def describe_export(result: ExportResult) -> str:
    """One-line summary of a finished export."""
    if result.format is ExportFormat.RAW_COPY:
        return f"Copied log to {result.destination}"
    if result.format is ExportFormat.DOCUMENT:
        return f"Exported {result.entry_count} entries ({result.page_count} pages) to {result.destination}"
    return f"Exported {result.entry_count} entries to {result.destination}"
