from __future__ import annotations

import os
from pathlib import Path

from codex_sessions.constants import SESSIONS_SUBDIR

APP_HOME = (Path("~/.codex-sessions")).expanduser()
CONFIG_PATH = APP_HOME / "config.yml"
DOTENV_PATH = APP_HOME / ".env"
LOG_PATH = APP_HOME / "logs" / "codex-sessions.log"


def resolve_codex_home(override: str | os.PathLike[str] | None = None) -> Path:
    """Resolve the Codex home directory.

    Order: explicit override, `$CODEX_HOME`, `~/.codex`.
    """
    if override:
        return Path(override).expanduser()

    env_val = os.environ.get("CODEX_HOME", "")
    if env_val.strip():
        return Path(env_val).expanduser()

    return Path("~/.codex").expanduser()


def sessions_root(codex_home: Path) -> Path:
    """Directory holding the rollout tree for a Codex home."""
    return codex_home / SESSIONS_SUBDIR
