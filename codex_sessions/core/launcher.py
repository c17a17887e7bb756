"""Hand a session back to the Codex runtime."""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Optional

from codex_sessions.core.errors import LaunchError

logger = logging.getLogger(__name__)


class ResumeLauncher:
    """Runs `<binary> resume <session id>` in the foreground."""

    def __init__(self, binary: str = "codex") -> None:
        self.binary = binary

    def command_for(self, session_id: str) -> list[str]:
        return [self.binary, "resume", session_id]

    def resume(self, session_id: str, cwd: Optional[str] = None) -> int:
        """Run the runtime until it exits.

        Args:
            session_id: Session to resume.
            cwd: Working directory for the runtime; the current one when None.

        Returns:
            The process exit status (always 0; failures raise).

        Raises:
            LaunchError: The directory is missing, the binary could not be
                started, or it exited non-zero.
        """
        if cwd is not None and not os.path.isdir(cwd):
            raise LaunchError(f"recorded directory {cwd} no longer exists")
        argv = self.command_for(session_id)
        logger.info("Resuming session %s in %s: %s", session_id, cwd or os.getcwd(), " ".join(argv))
        try:
            completed = subprocess.run(argv, check=False, cwd=cwd)
        except OSError as exc:
            raise LaunchError(f"failed to spawn {self.binary}: {exc.strerror or exc}") from exc
        if completed.returncode != 0:
            raise LaunchError(f"{self.binary} exited with status {completed.returncode}")
        return completed.returncode
