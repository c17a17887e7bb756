"""Session store operations shared by the browser and the command line."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from codex_sessions.core.errors import DeleteError, SessionNotFoundError
from codex_sessions.core.event_log import parse_event_log
from codex_sessions.core.models import ParsedLog, Session
from codex_sessions.core.scanner import DEFAULT_HEAD_LINES, DEFAULT_PREVIEW_CHARS, ScanResult, scan_sessions, summarize_session

logger = logging.getLogger(__name__)


class SessionStore:
    """Read-mostly access to a rollout tree."""

    def __init__(
        self,
        root: Path,
        *,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
        head_lines: int = DEFAULT_HEAD_LINES,
    ) -> None:
        self.root = root
        self.preview_chars = preview_chars
        self.head_lines = head_lines

    def scan(self) -> ScanResult:
        """Scan the tree. Raises SessionStoreError when the root is unreadable."""
        return scan_sessions(self.root, preview_chars=self.preview_chars, head_lines=self.head_lines)

    def load(self, session: Session) -> ParsedLog:
        """Parse a session log and record its entry count."""
        parsed = parse_event_log(session.path)
        session.entry_count = len(parsed.entries)
        return parsed

    def resolve(self, query: str, sessions: Sequence[Session] | None = None) -> Session:
        """Find a session by file path, exact id, or unique id prefix.

        Raises:
            SessionNotFoundError: Nothing matches, or a prefix is ambiguous.
        """
        if not query:
            raise SessionNotFoundError("No session selected")

        candidate = Path(query).expanduser()
        if candidate.is_file():
            try:
                return summarize_session(candidate, preview_chars=self.preview_chars, head_lines=self.head_lines)
            except OSError as exc:
                raise SessionNotFoundError(f"cannot read {candidate}: {exc.strerror or exc}") from exc

        known = list(sessions) if sessions is not None else self.scan().sessions
        needle = query.lower()
        exact = [session for session in known if session.session_id.lower() == needle]
        if exact:
            return exact[0]

        matches = [session for session in known if session.session_id.lower().startswith(needle)]
        if len(matches) == 1:
            return matches[0]
        if not matches:
            raise SessionNotFoundError(f"No session matching '{query}'")
        raise SessionNotFoundError(f"Multiple sessions match '{query}'")

    def delete(self, session: Session) -> bool:
        """Remove a session log.

        Returns False when the file was already gone; the session should be
        dropped from any listing either way.

        Raises:
            DeleteError: The file exists but cannot be removed.
        """
        try:
            session.path.unlink()
        except FileNotFoundError:
            logger.info("Session %s was already removed: %s", session.session_id, session.path)
            return False
        except OSError as exc:
            raise DeleteError(f"failed to delete {session.path}: {exc.strerror or exc}") from exc
        logger.info("Deleted session %s (%s)", session.session_id, session.path)
        return True
