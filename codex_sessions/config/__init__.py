"""Configuration management.

Settings come from `~/.codex-sessions/config.yml` (or `$CODEX_SESSIONS_CONFIG`),
validated by `BrowserSettings`. A `.env` file next to it is loaded first so
`${VAR}` references in the YAML and `$CODEX_HOME` can be set there.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from codex_sessions.config.loader import config_path, load_settings
from codex_sessions.config.schema import BrowserSettings
from codex_sessions.paths import DOTENV_PATH


def load_environment(dotenv_path: Optional[Path] = None) -> None:
    """Load `.env` without overriding variables already set."""
    load_dotenv(dotenv_path or DOTENV_PATH, override=False)


__all__ = ["BrowserSettings", "config_path", "load_environment", "load_settings"]
