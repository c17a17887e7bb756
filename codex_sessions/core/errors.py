"""Error taxonomy for session store operations.

Exceptions are raised by the core and caught at the boundary (browser
controller or CLI). Non-fatal findings that never interrupt an operation are
plain value objects collected next to the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class CodexSessionsError(Exception):
    """Base class for all codex-sessions failures."""


class SessionStoreError(CodexSessionsError):
    """The session store root exists but cannot be listed. Fatal."""


class SessionNotFoundError(CodexSessionsError):
    """No session matches the requested id, prefix or path."""


class CorruptSessionError(CodexSessionsError):
    """A session log cannot be opened at all."""


class ExportError(CodexSessionsError):
    """Writing an export failed."""


class DeleteError(CodexSessionsError):
    """Removing a session log failed; the session stays listed."""


class LaunchError(CodexSessionsError):
    """The resume binary could not start or exited abnormally."""


@dataclass(frozen=True)
class ScanWarning:
    """A file or directory skipped during a scan."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


@dataclass(frozen=True)
class ParseDiagnostic:
    """A log line skipped while parsing."""

    line_index: int  # 0-based
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_index + 1}: {self.reason}"
