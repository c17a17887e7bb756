"""Background scanning and preview parsing.

The worker never touches `BrowserState`; it posts messages that the UI loop
drains with `poll()` and applies on its own thread.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path

from codex_sessions.cli.tui.messages import PreviewFailed, PreviewLoaded, ScanFailed, ScanFinished, WorkerMessage
from codex_sessions.core.errors import CodexSessionsError
from codex_sessions.core.event_log import parse_event_log
from codex_sessions.core.export import render_transcript
from codex_sessions.core.models import Session
from codex_sessions.core.store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ScanTask:
    pass


@dataclass(frozen=True)
class _PreviewTask:
    session: Session


class BackgroundWorker:
    """Runs store reads off the UI thread.

    With `threaded=False` tasks run inline on submit, which keeps tests
    deterministic.
    """

    def __init__(self, store: SessionStore, width: int, *, threaded: bool = True) -> None:
        self.store = store
        self.width = width
        self.threaded = threaded
        self._tasks: queue.Queue[_ScanTask | _PreviewTask | None] = queue.Queue()
        self._results: queue.Queue[WorkerMessage] = queue.Queue()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if not self.threaded or self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="codex-sessions-worker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._tasks.put(None)
        self._thread.join(timeout=1.0)
        self._thread = None

    def submit_scan(self) -> None:
        self._submit(_ScanTask())

    def submit_preview(self, session: Session) -> None:
        self._submit(_PreviewTask(session))

    def poll(self) -> list[WorkerMessage]:
        """Drain every message posted since the last poll."""
        messages: list[WorkerMessage] = []
        while True:
            try:
                messages.append(self._results.get_nowait())
            except queue.Empty:
                return messages

    def _submit(self, task: _ScanTask | _PreviewTask) -> None:
        if self.threaded:
            self.start()
            self._tasks.put(task)
        else:
            self._execute(task)

    def _run(self) -> None:
        while True:
            task = self._tasks.get()
            if task is None:
                return
            self._execute(task)

    def _execute(self, task: _ScanTask | _PreviewTask) -> None:
        if isinstance(task, _ScanTask):
            self._results.put(self._scan())
        else:
            self._results.put(self._preview(task.session))

    def _scan(self) -> WorkerMessage:
        try:
            return ScanFinished(self.store.scan())
        except CodexSessionsError as exc:
            logger.error("Rescan failed: %s", exc)
            return ScanFailed(str(exc))

    def _preview(self, session: Session) -> WorkerMessage:
        path: Path = session.path
        try:
            parsed = parse_event_log(path)
        except CodexSessionsError as exc:
            logger.warning("Preview failed for %s: %s", path, exc)
            return PreviewFailed(path, str(exc))
        lines = render_transcript(parsed.entries, self.width)
        return PreviewLoaded(path, lines, len(parsed.entries), len(parsed.diagnostics))
