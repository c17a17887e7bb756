"""Session store discovery.

Walks the rollout tree and builds `Session` records from file names, file
stats and the first few records of each log. Logs are never parsed in full
here.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, cast

from codex_sessions.constants import (
    INSTRUCTION_MARKERS,
    PREVIEW_ELLIPSIS,
    ROLLOUT_PREFIX,
    ROLLOUT_SUFFIX,
    ROLLOUT_TIMESTAMP_FORMAT,
    SESSION_PREFIX_MARKERS,
)
from codex_sessions.core.errors import ScanWarning, SessionStoreError
from codex_sessions.core.event_log import RecordDecodeError, decode_record, entry_from_record, flatten_content
from codex_sessions.core.models import Role, Session

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_CHARS = 80
DEFAULT_HEAD_LINES = 50


@dataclass(frozen=True)
class ScanResult:
    """Sessions found under a root, most recent first, plus skipped paths."""

    sessions: list[Session] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)


@dataclass
class _HeadSummary:
    meta: Mapping[str, object] | None = None
    first_timestamp: str | None = None
    preview: str | None = None


def is_rollout_file(name: str) -> bool:
    """Whether a file name follows the rollout naming convention."""
    return name.startswith(ROLLOUT_PREFIX) and name.endswith(ROLLOUT_SUFFIX) and len(name) > len(
        ROLLOUT_PREFIX + ROLLOUT_SUFFIX
    )


def parse_rollout_name(name: str) -> tuple[datetime | None, str]:
    """Split `rollout-<timestamp>-<uuid>.jsonl` into (timestamp, session id).

    When no UUID tail is present the whole core of the name becomes the id.
    """
    core = name[len(ROLLOUT_PREFIX) : -len(ROLLOUT_SUFFIX)]
    session_id = core
    stamp_text = ""
    # UUIDs contain dashes, so try every split point from the right.
    for idx in range(len(core) - 1, -1, -1):
        if core[idx] != "-":
            continue
        try:
            session_id = str(uuid.UUID(core[idx + 1 :]))
        except ValueError:
            continue
        stamp_text = core[:idx]
        break

    stamp: datetime | None = None
    if stamp_text:
        try:
            stamp = datetime.strptime(stamp_text, ROLLOUT_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            stamp = None
    return stamp, session_id


def parse_timestamp(value: object) -> datetime | None:
    """Parse an RFC 3339 timestamp as written by the runtime."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def truncate_preview(text: str, max_chars: int = DEFAULT_PREVIEW_CHARS) -> str:
    """Collapse whitespace and cut to `max_chars` characters plus an ellipsis."""
    collapsed = " ".join(text.split())
    if len(collapsed) <= max_chars:
        return collapsed
    return collapsed[:max_chars] + PREVIEW_ELLIPSIS


def _is_session_prefix(text: str) -> bool:
    lowered = text.lstrip().lower()
    return lowered.startswith(SESSION_PREFIX_MARKERS)


def _looks_like_instructions(text: str) -> bool:
    return text.startswith(INSTRUCTION_MARKERS[0]) or INSTRUCTION_MARKERS[1] in text


def preview_from_text(text: str) -> str | None:
    """Human-readable preview candidate, or None for injected context blocks."""
    if _is_session_prefix(text):
        return None
    pieces = [
        piece.strip() for piece in text.split("\n\n") if piece.strip() and not _looks_like_instructions(piece.strip())
    ]
    if not pieces:
        return None
    return " ".join(pieces)


def _preview_candidate(record: Mapping[str, object], line_index: int) -> str | None:
    payload = record.get("payload")
    if record.get("type") == "event_msg" and isinstance(payload, dict):
        if payload.get("type") == "user_message":
            return preview_from_text(flatten_content(payload.get("message")))
        return None
    entry = entry_from_record(record, line_index)
    if entry is None or entry.role is not Role.USER:
        return None
    return preview_from_text(entry.content)


def _read_head(path: Path, head_lines: int) -> _HeadSummary:
    summary = _HeadSummary()
    with open(path, "rb") as handle:
        for line_index, raw in enumerate(handle):
            if line_index >= head_lines:
                break
            if not raw.strip():
                continue
            try:
                record = decode_record(raw)
            except RecordDecodeError:
                continue

            if summary.first_timestamp is None and isinstance(record.get("timestamp"), str):
                summary.first_timestamp = cast(str, record["timestamp"])

            payload = record.get("payload")
            if record.get("type") == "session_meta" and isinstance(payload, dict):
                if summary.meta is None:
                    summary.meta = cast(Mapping[str, object], payload)
            elif summary.preview is None:
                summary.preview = _preview_candidate(record, line_index)

            if summary.meta is not None and summary.preview is not None:
                break
    return summary


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def summarize_session(
    path: Path,
    *,
    preview_chars: int = DEFAULT_PREVIEW_CHARS,
    head_lines: int = DEFAULT_HEAD_LINES,
) -> Session:
    """Build a `Session` for one rollout file.

    Raises:
        OSError: The file cannot be stat'ed or opened.
    """
    stat = path.stat()
    name_stamp, session_id = parse_rollout_name(path.name)
    head = _read_head(path, head_lines)
    meta = head.meta or {}

    git = meta.get("git")
    git_branch = _optional_str(git.get("branch")) if isinstance(git, dict) else None
    created_at = parse_timestamp(meta.get("timestamp")) or parse_timestamp(head.first_timestamp) or name_stamp

    return Session(
        session_id=session_id,
        path=path.resolve(),
        created_at=created_at,
        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        preview=truncate_preview(head.preview, preview_chars) if head.preview else "",
        cwd=_optional_str(meta.get("cwd")),
        git_branch=git_branch,
        provider=_optional_str(meta.get("model_provider")),
        source=_optional_str(meta.get("source")),
    )


def sort_sessions(sessions: list[Session]) -> list[Session]:
    """Default browse order: most recently modified first."""
    return sorted(sessions, key=lambda s: (s.modified_at, s.session_id), reverse=True)


def scan_sessions(
    root: Path,
    *,
    preview_chars: int = DEFAULT_PREVIEW_CHARS,
    head_lines: int = DEFAULT_HEAD_LINES,
) -> ScanResult:
    """Discover every rollout below `root`.

    A missing root means nothing has been recorded yet and yields an empty
    result.

    Raises:
        SessionStoreError: `root` exists but cannot be listed.
    """
    if not root.exists():
        logger.debug("Session store %s does not exist yet", root)
        return ScanResult()

    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        raise SessionStoreError(f"cannot open session store {root}: {exc.strerror or exc}") from exc

    sessions: list[Session] = []
    warnings: list[ScanWarning] = []

    def _on_walk_error(exc: OSError) -> None:
        warnings.append(ScanWarning(Path(exc.filename or root), exc.strerror or str(exc)))

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            if not is_rollout_file(name):
                continue
            path = Path(dirpath) / name
            try:
                sessions.append(summarize_session(path, preview_chars=preview_chars, head_lines=head_lines))
            except OSError as exc:
                warnings.append(ScanWarning(path, exc.strerror or str(exc)))

    for warning in warnings:
        logger.warning("Skipped during scan: %s", warning)
    logger.debug("Scanned %s: %d sessions, %d warnings", root, len(sessions), len(warnings))
    return ScanResult(sessions=sort_sessions(sessions), warnings=warnings)
