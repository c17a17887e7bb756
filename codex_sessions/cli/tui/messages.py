"""Messages posted by the background worker to the UI loop."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from codex_sessions.core.scanner import ScanResult


@dataclass(frozen=True)
class ScanFinished:
    """A rescan completed."""

    result: ScanResult


@dataclass(frozen=True)
class ScanFailed:
    """A rescan could not list the store."""

    error: str


@dataclass(frozen=True)
class PreviewLoaded:
    """Transcript lines for one session, ready for the preview pane."""

    path: Path
    lines: list[str]
    entry_count: int
    diagnostics: int = 0


@dataclass(frozen=True)
class PreviewFailed:
    path: Path
    error: str


WorkerMessage = Union[ScanFinished, ScanFailed, PreviewLoaded, PreviewFailed]
