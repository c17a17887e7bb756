"""Query matching for the session list."""

from __future__ import annotations

from collections.abc import Sequence

from codex_sessions.core.models import Session


def session_matches(session: Session, needle: str) -> bool:
    """Case-insensitive substring match on preview or id; `needle` is casefolded."""
    return needle in session.session_id.casefold() or needle in session.preview.casefold()


def filter_sessions(sessions: Sequence[Session], query: str) -> list[Session]:
    """Return the sessions matching `query`, keeping their order.

    An empty query returns every session.
    """
    if not query:
        return list(sessions)
    needle = query.casefold()
    return [session for session in sessions if session_matches(session, needle)]
