"""Command-mode line parsing."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from enum import Enum


class CommandName(str, Enum):
    EXPORT = "export"
    RESUME = "resume"
    JUMP = "jump"
    DELETE = "delete"
    REFRESH = "refresh"
    QUIT = "quit"
    HELP = "help"


_ALIASES: dict[str, CommandName] = {
    "export": CommandName.EXPORT,
    "w": CommandName.EXPORT,
    "resume": CommandName.RESUME,
    "jump": CommandName.JUMP,
    "cd": CommandName.JUMP,
    "delete": CommandName.DELETE,
    "rm": CommandName.DELETE,
    "refresh": CommandName.REFRESH,
    "rescan": CommandName.REFRESH,
    "quit": CommandName.QUIT,
    "q": CommandName.QUIT,
    "help": CommandName.HELP,
}

HELP_TEXT = (
    "enter=resume  /=filter  dd=delete  r=refresh  q=quit  :jump resumes in the session cwd  "
    ":export PATH (.jsonl raw, .json records, .pdf, else text)"
)


class CommandError(ValueError):
    """A command line that cannot be dispatched."""


@dataclass(frozen=True)
class Command:
    name: CommandName
    argument: str | None = None


def parse_command(text: str) -> Command | None:
    """Parse a command line; returns None for a blank line.

    Raises:
        CommandError: Unknown command, bad quoting, or a missing/extra argument.
    """
    try:
        tokens = shlex.split(text)
    except ValueError as exc:
        raise CommandError(f"Cannot parse command: {exc}") from exc
    if not tokens:
        return None

    word, args = tokens[0], tokens[1:]
    name = _ALIASES.get(word.lower())
    if name is None:
        raise CommandError(f"Unknown command: {word}")

    if name is CommandName.EXPORT:
        if len(args) != 1:
            raise CommandError("usage: :export <file_path>")
        return Command(name, args[0])

    if args:
        raise CommandError(f"{name.value} takes no arguments")
    return Command(name)
