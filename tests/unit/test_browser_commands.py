"""Unit tests for command-line parsing in command mode."""

import pytest

from codex_sessions.cli.tui.commands import Command, CommandError, CommandName, parse_command


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("export out.json", Command(CommandName.EXPORT, "out.json")),
        ("export 'my notes.txt'", Command(CommandName.EXPORT, "my notes.txt")),
        ("q", Command(CommandName.QUIT)),
        ("quit", Command(CommandName.QUIT)),
        ("  refresh  ", Command(CommandName.REFRESH)),
        ("resume", Command(CommandName.RESUME)),
        ("jump", Command(CommandName.JUMP)),
        ("cd", Command(CommandName.JUMP)),
        ("delete", Command(CommandName.DELETE)),
        ("help", Command(CommandName.HELP)),
    ],
)
def test_parse_command(text: str, expected: Command) -> None:
    assert parse_command(text) == expected


def test_blank_line_is_no_command() -> None:
    assert parse_command("   ") is None


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("export", "usage: :export <file_path>"),
        ("export a b", "usage: :export <file_path>"),
        ("launch", "Unknown command: launch"),
        ("quit now", "quit takes no arguments"),
    ],
)
def test_invalid_commands(text: str, message: str) -> None:
    with pytest.raises(CommandError, match=message):
        parse_command(text)


def test_unbalanced_quotes() -> None:
    with pytest.raises(CommandError, match="Cannot parse command"):
        parse_command("export 'out.json")
