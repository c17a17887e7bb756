"""Unit tests for session list filtering."""

import pytest

from codex_sessions.core.filtering import filter_sessions
from tests.conftest import make_session

SESSIONS = [
    make_session("aaa-111", "fix login bug"),
    make_session("bbb-222", "add pdf export"),
    make_session("ccc-333", "Debug flaky test"),
    make_session("ddd-bug", ""),
]


def _ids(query: str) -> list[str]:
    return [s.session_id for s in filter_sessions(SESSIONS, query)]


def test_bug_query_matches_preview_and_id() -> None:
    assert _ids("bug") == ["aaa-111", "ccc-333", "ddd-bug"]


def test_empty_query_returns_everything_in_order() -> None:
    assert filter_sessions(SESSIONS, "") == SESSIONS
    assert filter_sessions(SESSIONS, "") is not SESSIONS


def test_match_is_case_insensitive() -> None:
    assert _ids("PDF") == ["bbb-222"]
    assert _ids("debug") == ["ccc-333"]


@pytest.mark.parametrize("query", ["b", "bu", "bug", "x", "222", " "])
def test_result_is_ordered_subsequence(query: str) -> None:
    result = filter_sessions(SESSIONS, query)

    positions = [SESSIONS.index(session) for session in result]
    assert positions == sorted(positions)


def test_longer_query_never_widens_result() -> None:
    for shorter, longer in [("b", "bu"), ("bu", "bug"), ("e", "ex")]:
        assert set(_ids(longer)) <= set(_ids(shorter))
