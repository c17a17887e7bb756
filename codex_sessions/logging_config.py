"""codex-sessions logging configuration.

Logs go to a rotating file (default `~/.codex-sessions/logs/codex-sessions.log`)
because anything written to stderr would corrupt the curses screen.
Level resolution: explicit argument, `CODEX_SESSIONS_LOG_LEVEL`, the
configured default, then INFO.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from codex_sessions.paths import LOG_PATH

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_LEVEL_ENV = "CODEX_SESSIONS_LOG_LEVEL"
_HANDLER_NAME = "codex-sessions-file"


def resolve_level(level: Optional[str] = None, default: Optional[str] = None) -> str:
    """Pick the effective level name; unknown names from the environment fall back to INFO."""
    for candidate in (level, os.environ.get(LOG_LEVEL_ENV), default):
        if candidate and candidate.strip():
            normalized = candidate.strip().upper()
            return normalized if normalized in LOG_LEVELS else "INFO"
    return "INFO"


def setup_logging(
    level: Optional[str] = None,
    log_path: Optional[Path] = None,
    *,
    default: Optional[str] = None,
) -> None:
    """Configure the `codex_sessions` logger.

    Args:
        level: Optional override for `CODEX_SESSIONS_LOG_LEVEL`.
        log_path: Optional override for the log file location.
        default: Level used when neither `level` nor the environment sets one.
    """
    resolved = resolve_level(level, default)

    logger = logging.getLogger("codex_sessions")
    logger.setLevel(resolved)
    logger.propagate = False
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()

    path = log_path or LOG_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(path, maxBytes=1_048_576, backupCount=3, encoding="utf-8")
    except OSError:
        # Read-only home: keep running without a log file.
        handler = logging.NullHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
