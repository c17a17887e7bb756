"""Unit tests for the codex-sessions command line."""

import json
from pathlib import Path

import pytest

from codex_sessions.cli import main as cli
from codex_sessions.cli.main import filter_listing
from codex_sessions.cli.tui.views.sessions import EMPTY_STORE
from codex_sessions.logging_config import resolve_level
from tests.conftest import SESSION_A, SESSION_B, SESSION_C, make_session


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)


def _run(tmp_path: Path, *args: str) -> None:
    cli.main(["--codex-home", str(tmp_path / "codex"), "--config", str(tmp_path / "none.yml"), *args])


def test_list_json(tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "list", "--json", "--limit", "2")

    payload = json.loads(capsys.readouterr().out)
    records = payload["sessions"]
    assert [r["id"] for r in records] == [SESSION_B, SESSION_C]
    assert payload["next_cursor"] == SESSION_C
    assert records[0]["preview"] == "add pdf export"
    assert records[0]["git_branch"] == "feature/export"


def test_list_filters(tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "ls", "--json", "--provider", "anthropic,local")
    assert json.loads(capsys.readouterr().out) == {"sessions": [], "next_cursor": None}

    _run(tmp_path, "ls", "--json", "--provider", "OpenAI", "--cwd", "/work/app", "--limit", "0")
    assert len(json.loads(capsys.readouterr().out)["sessions"]) == 3


def test_list_table_and_empty_store(
    tmp_path: Path, sessions_dir: Path, capsys: pytest.CaptureFixture[str], make_rollout
) -> None:
    _run(tmp_path, "list")
    assert EMPTY_STORE in capsys.readouterr().out

    make_rollout(SESSION_A, [])
    _run(tmp_path, "list")
    assert "Preview" in capsys.readouterr().out


def test_info(tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "info", SESSION_A)

    out = capsys.readouterr().out
    assert SESSION_A in out
    assert "Entries" in out
    assert "Skipped lines" in out


def test_resume_dry_run(tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path, "--codex-bin", "/opt/bin/codex", "resume", "--last", "--dry-run")

    assert capsys.readouterr().out.strip() == f"/opt/bin/codex resume {SESSION_B}"


def test_list_cursor_continues_after_previous_page(
    tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]
) -> None:
    _run(tmp_path, "list", "--json", "--limit", "2", "--cursor", SESSION_C)

    payload = json.loads(capsys.readouterr().out)
    assert [r["id"] for r in payload["sessions"]] == [SESSION_A]
    assert payload["next_cursor"] is None


def test_list_table_prints_cursor_hint(
    tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]
) -> None:
    _run(tmp_path, "list", "--limit", "1")

    assert f"Continue with --cursor {SESSION_B}" in capsys.readouterr().out


def test_list_unknown_cursor_exits_1(
    tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run(tmp_path, "list", "--cursor", "nope")

    assert exc_info.value.code == 1
    assert "codex-sessions error: unknown cursor: nope" in capsys.readouterr().err


def test_resume_without_target_prompts_for_session(
    tmp_path: Path,
    populated_store: dict[str, Path],
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(cli.Prompt, "ask", lambda *_args, **_kwargs: "2")

    _run(tmp_path, "resume", "--dry-run")

    assert capsys.readouterr().out.strip().splitlines()[-1] == f"codex resume {SESSION_C}"


def test_resume_picker_with_empty_store_exits_1(
    tmp_path: Path, sessions_dir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run(tmp_path, "resume")

    assert exc_info.value.code == 1
    assert "No recorded sessions available to resume" in capsys.readouterr().err


def test_resume_jump_runs_in_recorded_directory(
    tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]
) -> None:
    _run(tmp_path, "resume", SESSION_A, "--jump", "--dry-run")

    assert capsys.readouterr().out.strip() == f"cd /work/app && codex resume {SESSION_A}"


def test_resume_jump_without_directory_exits_1(
    tmp_path: Path, make_rollout, capsys: pytest.CaptureFixture[str]
) -> None:
    make_rollout(SESSION_A, [])

    with pytest.raises(SystemExit) as exc_info:
        _run(tmp_path, "resume", "--last", "--jump")

    assert exc_info.value.code == 1
    assert "no working directory recorded" in capsys.readouterr().err


def test_invalid_log_level_is_a_usage_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run(tmp_path, "--log-level", "chatty", "list")

    assert exc_info.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


def test_environment_log_level_beats_config_file(
    tmp_path: Path, sessions_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[str] = []
    monkeypatch.setattr(cli, "setup_logging", lambda level, default=None: calls.append(resolve_level(level, default)))
    monkeypatch.setenv("CODEX_SESSIONS_LOG_LEVEL", "warning")
    config = tmp_path / "config.yml"
    config.write_text("log_level: debug\n", encoding="utf-8")

    cli.main(["--codex-home", str(tmp_path / "codex"), "--config", str(config), "list"])
    cli.main(["--codex-home", str(tmp_path / "codex"), "--config", str(config), "--log-level", "error", "list"])

    assert calls == ["WARNING", "ERROR"]



def test_delete_with_yes(tmp_path: Path, populated_store: dict[str, Path]) -> None:
    _run(tmp_path, "delete", SESSION_A, "--yes")

    assert not populated_store[SESSION_A].exists()


def test_delete_declined(
    tmp_path: Path, populated_store: dict[str, Path], monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli.Confirm, "ask", lambda *_args, **_kwargs: False)

    _run(tmp_path, "delete", SESSION_A)

    assert populated_store[SESSION_A].exists()
    assert "Aborted." in capsys.readouterr().out


def test_export(tmp_path: Path, populated_store: dict[str, Path]) -> None:
    destination = tmp_path / "exports" / "a.json"

    _run(tmp_path, "export", SESSION_A, str(destination))

    assert [r["role"] for r in json.loads(destination.read_text(encoding="utf-8"))] == ["user", "assistant"]


def test_unknown_session_exits_1(
    tmp_path: Path, populated_store: dict[str, Path], capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run(tmp_path, "info", "ffff")

    assert exc_info.value.code == 1
    assert "No session matching 'ffff'" in capsys.readouterr().err


def test_browser_with_empty_store_exits_cleanly(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(tmp_path)

    assert EMPTY_STORE in capsys.readouterr().out


def test_unreadable_store_is_fatal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "codex").mkdir()
    (tmp_path / "codex" / "sessions").write_text("", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        _run(tmp_path)

    assert exc_info.value.code == 1
    assert "cannot open session store" in capsys.readouterr().err


def test_filter_listing_limit() -> None:
    sessions = [make_session(str(i)) for i in range(5)]

    first = filter_listing(sessions, limit=3)
    assert [s.session_id for s in first.sessions] == ["0", "1", "2"]
    assert first.next_cursor == "2"
    rest = filter_listing(sessions, cursor=first.next_cursor, limit=3)
    assert [s.session_id for s in rest.sessions] == ["3", "4"]
    assert rest.next_cursor is None
    assert len(filter_listing(sessions, limit=0).sessions) == 5
