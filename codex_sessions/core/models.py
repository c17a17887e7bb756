"""Typed records for sessions and parsed log entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from codex_sessions.core.errors import ParseDiagnostic


class Role(str, Enum):
    """Speaker of a parsed entry."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Entry:
    """One parsed message of a session log."""

    role: Role
    content: str
    line_index: int

    def to_dict(self) -> dict[str, str]:
        """Serialize to the structured export record."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class Session:
    """Metadata for one rollout file.

    Everything except `entry_count` is fixed at scan time; `entry_count` stays
    `None` until the log is parsed for the first time.
    """

    session_id: str
    path: Path
    created_at: datetime | None
    modified_at: datetime
    preview: str = ""
    cwd: str | None = None
    git_branch: str | None = None
    provider: str | None = None
    source: str | None = None
    entry_count: int | None = field(default=None, compare=False)

    def resume_hint(self, binary: str = "codex") -> str:
        return f"{binary} resume {self.session_id}"

    def to_dict(self) -> dict[str, object]:  # guard: loose-dict - JSON listing payload
        """Serialize for `list --json`."""
        return {
            "id": self.session_id,
            "path": str(self.path),
            "preview": self.preview or None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.modified_at.isoformat(),
            "cwd": self.cwd,
            "git_branch": self.git_branch,
            "provider": self.provider,
            "source": self.source,
            "entry_count": self.entry_count,
        }


@dataclass(frozen=True)
class ParsedLog:
    """Eager parse result: entries in log order plus skipped-line diagnostics."""

    entries: list[Entry]
    diagnostics: list[ParseDiagnostic]
