"""Formatting utilities for TUI display."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path


def format_relative_time(moment: datetime | None, now: datetime | None = None) -> str:
    """Convert a timestamp to a compact age like '42s', '5m', '3h', '2d'.

    Returns empty string if unavailable.
    """
    if moment is None:
        return ""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = int((now - moment).total_seconds())
    if seconds < 0:
        return "now"
    if seconds < 60:
        return f"{seconds}s"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    return f"{hours // 24}d"


def format_timestamp(moment: datetime | None) -> str:
    """Local 'YYYY-MM-DD HH:MM' or empty string."""
    if moment is None:
        return ""
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


def shorten_path(path: str | None, max_len: int = 40, home: str | None = None) -> str:
    """Shorten a file path for display.

    Replaces the home directory with ~ and truncates from the left.
    """
    if not path:
        return ""
    home = home if home is not None else str(Path.home())
    shortened = path
    if home and (path == home or path.startswith(home.rstrip("/") + "/")):
        shortened = "~" + path[len(home.rstrip("/")) :]
    if len(shortened) <= max_len:
        return shortened
    # Keep the last segments
    return "..." + shortened[-(max_len - 3) :]


def truncate_text(text: str | None, max_len: int = 60) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return ""
    text = " ".join(text.split())
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"
