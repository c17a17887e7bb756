"""Pytest configuration for codex-sessions tests."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from codex_sessions.core.models import Session

logging.getLogger("codex_sessions").handlers.clear()

SESSION_A = "0199a213-81c0-7800-8aa1-bbab2a035a53"
SESSION_B = "0199a213-81c0-7800-8aa1-bbab2a035a54"
SESSION_C = "0199a213-81c0-7800-8aa1-bbab2a035a55"


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.path.parts and "unit" not in item.keywords:
            item.add_marker(pytest.mark.unit)
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))


def user_message(text: str, timestamp: str = "2025-10-01T09:00:01.000Z") -> dict[str, object]:
    return {
        "timestamp": timestamp,
        "type": "response_item",
        "payload": {"type": "message", "role": "user", "content": [{"type": "input_text", "text": text}]},
    }


def assistant_message(text: str, timestamp: str = "2025-10-01T09:00:02.000Z") -> dict[str, object]:
    return {
        "timestamp": timestamp,
        "type": "response_item",
        "payload": {"type": "message", "role": "assistant", "content": [{"type": "output_text", "text": text}]},
    }


def session_meta(session_id: str, cwd: str = "/work/app", branch: str = "main") -> dict[str, object]:
    return {
        "timestamp": "2025-10-01T09:00:00.000Z",
        "type": "session_meta",
        "payload": {
            "id": session_id,
            "timestamp": "2025-10-01T09:00:00.000Z",
            "cwd": cwd,
            "model_provider": "openai",
            "source": "cli",
            "git": {"branch": branch},
        },
    }


def write_rollout(
    root: Path,
    session_id: str,
    records: list[object],
    *,
    stamp: str = "2025-10-01T09-00-00",
    mtime: float | None = None,
) -> Path:
    """Write a rollout under `root/YYYY/MM/DD` and optionally pin its mtime."""
    year, month, day = stamp[:10].split("-")
    directory = root / year / month / day
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"rollout-{stamp}-{session_id}.jsonl"
    lines = [record if isinstance(record, str) else json.dumps(record) for record in records]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def sessions_dir(tmp_path: Path) -> Path:
    root = tmp_path / "codex" / "sessions"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def make_rollout(sessions_dir: Path) -> Callable[..., Path]:
    def _make(session_id: str, records: list[object], **kwargs: object) -> Path:
        return write_rollout(sessions_dir, session_id, records, **kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def populated_store(make_rollout: Callable[..., Path]) -> dict[str, Path]:
    """Three sessions; B is the most recently modified, then C, then A."""
    return {
        SESSION_A: make_rollout(
            SESSION_A,
            [session_meta(SESSION_A), user_message("fix the login bug"), assistant_message("Looking at auth.py")],
            mtime=1_700_000_000,
        ),
        SESSION_B: make_rollout(
            SESSION_B,
            [session_meta(SESSION_B, branch="feature/export"), user_message("add pdf export")],
            stamp="2025-10-02T10-00-00",
            mtime=1_700_000_300,
        ),
        SESSION_C: make_rollout(
            SESSION_C,
            [session_meta(SESSION_C), user_message("Debug the flaky test")],
            stamp="2025-10-03T11-00-00",
            mtime=1_700_000_200,
        ),
    }


def make_session(session_id: str, preview: str = "", *, minutes_ago: int = 0, root: Path | None = None) -> Session:
    """In-memory session for state tests; the path need not exist."""
    base = root or Path("/sessions")
    modified = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago)
    return Session(
        session_id=session_id,
        path=base / f"rollout-2025-10-01T12-00-00-{session_id}.jsonl",
        created_at=modified,
        modified_at=modified,
        preview=preview,
    )


@pytest.fixture(autouse=True)
def _isolated_logging():
    """Keep codex_sessions records flowing to caplog and away from ~/.codex-sessions."""
    logger = logging.getLogger("codex_sessions")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
