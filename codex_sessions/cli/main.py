"""codex-sessions command line.

Without a subcommand the interactive browser starts; the subcommands cover
the same operations for scripts.
"""

from __future__ import annotations

import argparse
import curses
import json
import logging
import os
import shlex
import sys
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from codex_sessions import __version__
from codex_sessions.cli.tui.app import BrowserApp
from codex_sessions.cli.tui.controller import BrowserController, describe_export
from codex_sessions.cli.tui.session_launcher import suspended_screen
from codex_sessions.cli.tui.state import BrowserState
from codex_sessions.cli.tui.types import CursesWindow
from codex_sessions.cli.tui.utils.formatters import format_relative_time, format_timestamp, shorten_path
from codex_sessions.cli.tui.views.sessions import EMPTY_STORE
from codex_sessions.cli.tui.worker import BackgroundWorker
from codex_sessions.config import BrowserSettings, load_environment, load_settings
from codex_sessions.core.errors import CodexSessionsError
from codex_sessions.core.export import export_session
from codex_sessions.core.launcher import ResumeLauncher
from codex_sessions.core.models import Session
from codex_sessions.core.scanner import ScanResult
from codex_sessions.core.store import SessionStore
from codex_sessions.logging_config import LOG_LEVELS, setup_logging
from codex_sessions.paths import resolve_codex_home, sessions_root

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20


class CliError(CodexSessionsError):
    """Invalid command line usage."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codex-sessions", description="Browse, resume and export Codex sessions.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--codex-home", help="Codex home directory (default: $CODEX_HOME or ~/.codex)")
    parser.add_argument("--codex-bin", help="Codex binary used to resume sessions")
    parser.add_argument("--config", help="Settings file (default: ~/.codex-sessions/config.yml)")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="Log level for the log file")

    sub = parser.add_subparsers(dest="command")

    list_parser = sub.add_parser("list", aliases=["ls"], help="List recorded sessions")
    list_parser.add_argument("--limit", type=int, default=DEFAULT_LIST_LIMIT, help="Rows to show (0 = all)")
    list_parser.add_argument("--cwd", help="Only sessions started in this directory")
    list_parser.add_argument("--provider", help="Comma-separated model providers to include")
    list_parser.add_argument("--cursor", help="Continue after the session id printed by a previous page")
    list_parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    info_parser = sub.add_parser("info", help="Show details for one session")
    info_parser.add_argument("session", help="Session id, id prefix, or rollout path")

    resume_parser = sub.add_parser("resume", help="Resume a session with the Codex binary")
    resume_parser.add_argument("session", nargs="?", help="Session id, id prefix, or rollout path")
    resume_parser.add_argument("--last", action="store_true", help="Resume the most recent session")
    resume_parser.add_argument("--jump", action="store_true", help="Run Codex in the session's recorded directory")
    resume_parser.add_argument("--dry-run", action="store_true", help="Print the command instead of running it")

    delete_parser = sub.add_parser("delete", aliases=["rm"], help="Delete a session log")
    delete_parser.add_argument("session", help="Session id, id prefix, or rollout path")
    delete_parser.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")

    export_parser = sub.add_parser("export", help="Export a session (format follows the file suffix)")
    export_parser.add_argument("session", help="Session id, id prefix, or rollout path")
    export_parser.add_argument("path", help="Destination file (.jsonl, .json, .pdf, or text)")
    return parser


@dataclass(frozen=True)
class ListingPage:
    """One page of `list` output and the cursor for the next one."""

    sessions: list[Session]
    next_cursor: Optional[str] = None


def filter_listing(
    sessions: list[Session],
    *,
    cwd: Optional[str] = None,
    providers: Optional[str] = None,
    cursor: Optional[str] = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> ListingPage:
    """Apply `list` options in order: cwd, provider, cursor, limit.

    The cursor is the id of the last session on the previous page.

    Raises:
        CliError: The cursor names no session in the filtered listing.
    """
    selected = sessions
    if cwd:
        wanted = os.path.normpath(os.path.abspath(os.path.expanduser(cwd)))
        selected = [s for s in selected if s.cwd and os.path.normpath(s.cwd) == wanted]
    if providers:
        names = {name.strip().lower() for name in providers.split(",") if name.strip()}
        selected = [s for s in selected if (s.provider or "").lower() in names]
    if cursor:
        ids = [s.session_id for s in selected]
        if cursor not in ids:
            raise CliError(f"unknown cursor: {cursor}")
        selected = selected[ids.index(cursor) + 1 :]
    if limit > 0 and len(selected) > limit:
        return ListingPage(selected[:limit], next_cursor=selected[limit - 1].session_id)
    return ListingPage(selected)


def _sessions_table(sessions: list[Session], *, numbered: bool = False) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    if numbered:
        table.add_column("#", justify="right", no_wrap=True)
    table.add_column("ID", no_wrap=True)
    table.add_column("Updated", no_wrap=True)
    table.add_column("Branch", no_wrap=True)
    table.add_column("CWD", no_wrap=True)
    table.add_column("Preview", overflow="ellipsis", no_wrap=True)
    for number, session in enumerate(sessions, start=1):
        cells = [
            session.session_id,
            format_relative_time(session.modified_at),
            session.git_branch or "-",
            shorten_path(session.cwd or "-"),
            session.preview or "",
        ]
        table.add_row(*([str(number)] if numbered else []), *cells)
    return table


def _cmd_list(store: SessionStore, args: argparse.Namespace, console: Console) -> None:
    page = filter_listing(
        store.scan().sessions, cwd=args.cwd, providers=args.provider, cursor=args.cursor, limit=args.limit
    )
    if args.json:
        payload = {"sessions": [s.to_dict() for s in page.sessions], "next_cursor": page.next_cursor}
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    if not page.sessions:
        console.print(EMPTY_STORE)
        return
    console.print(_sessions_table(page.sessions))
    if page.next_cursor:
        console.print(f"More sessions available. Continue with --cursor {page.next_cursor}", markup=False)


def _cmd_info(store: SessionStore, args: argparse.Namespace, console: Console) -> None:
    session = store.resolve(args.session)
    parsed = store.load(session)

    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()
    grid.add_row("ID", session.session_id)
    grid.add_row("Path", str(session.path))
    grid.add_row("CWD", session.cwd or "-")
    grid.add_row("Provider", session.provider or "-")
    grid.add_row("Branch", session.git_branch or "-")
    grid.add_row("Started", format_timestamp(session.created_at) or "-")
    grid.add_row("Updated", format_timestamp(session.modified_at))
    grid.add_row("Source", session.source or "-")
    grid.add_row("Entries", str(session.entry_count))
    grid.add_row("Skipped lines", str(len(parsed.diagnostics)))
    console.print(grid)
    for diagnostic in parsed.diagnostics:
        console.print(f"  {diagnostic}", style="yellow", markup=False)


def _pick_session(store: SessionStore, console: Console) -> Session:
    sessions = store.scan().sessions[:DEFAULT_LIST_LIMIT]
    if not sessions:
        raise CliError("No recorded sessions available to resume")

    console.print(_sessions_table(sessions, numbered=True))
    choice = Prompt.ask(
        "Pick a session to resume",
        choices=[str(number) for number in range(1, len(sessions) + 1)],
        default="1",
        show_choices=False,
        console=console,
    )
    return sessions[int(choice) - 1]


def _cmd_resume(store: SessionStore, launcher: ResumeLauncher, args: argparse.Namespace, console: Console) -> None:
    if args.session:
        session = store.resolve(args.session)
    elif args.last:
        sessions = store.scan().sessions
        if not sessions:
            raise CliError(EMPTY_STORE)
        session = sessions[0]
    else:
        session = _pick_session(store, console)

    cwd: Optional[str] = None
    if args.jump:
        if not session.cwd:
            raise CliError(f"no working directory recorded for session {session.session_id}")
        cwd = session.cwd

    if args.dry_run:
        command = shlex.join(launcher.command_for(session.session_id))
        print(f"cd {shlex.quote(cwd)} && {command}" if cwd else command)
        return
    launcher.resume(session.session_id, cwd=cwd)


def _cmd_delete(store: SessionStore, args: argparse.Namespace, console: Console) -> None:
    session = store.resolve(args.session)
    if not args.yes and not Confirm.ask(f"Delete session {session.session_id}?", default=False, console=console):
        console.print("Aborted.")
        return
    if store.delete(session):
        console.print(f"Deleted {session.path}", markup=False)
    else:
        console.print(f"{session.path} was already removed", markup=False)


def _cmd_export(store: SessionStore, settings: BrowserSettings, args: argparse.Namespace, console: Console) -> None:
    session = store.resolve(args.session)
    result = export_session(session.path, Path(args.path), width=settings.display_width)
    console.print(describe_export(result), markup=False)


def _run_browser(store: SessionStore, settings: BrowserSettings, launcher: ResumeLauncher) -> None:
    # The first scan runs before curses so a broken store fails on a clean terminal.
    result: ScanResult = store.scan()
    if not result.sessions:
        print(EMPTY_STORE)
        return

    def _ui(stdscr: CursesWindow) -> None:
        controller = BrowserController(
            BrowserState(),
            store,
            settings,
            launcher,
            worker=BackgroundWorker(store, settings.display_width),
            suspend=lambda: suspended_screen(stdscr),
        )
        controller.load(result)
        BrowserApp(controller).run(stdscr)

    curses.wrapper(_ui)


def _main_impl(argv: list[str]) -> None:
    args = build_parser().parse_args(argv)

    load_environment()
    try:
        settings = load_settings(Path(args.config).expanduser() if args.config else None)
    except ValidationError as exc:
        raise CliError(f"invalid settings: {exc}") from exc
    setup_logging(args.log_level, default=settings.log_level)

    codex_home = resolve_codex_home(args.codex_home or settings.codex_home)
    store = SessionStore(
        sessions_root(codex_home),
        preview_chars=settings.preview_chars,
        head_lines=settings.head_lines,
    )
    launcher = ResumeLauncher(args.codex_bin or settings.codex_bin)
    console = Console()
    logger.debug("codex-sessions %s command=%s root=%s", __version__, args.command, store.root)

    command = args.command
    if command is None:
        _run_browser(store, settings, launcher)
    elif command in ("list", "ls"):
        _cmd_list(store, args, console)
    elif command == "info":
        _cmd_info(store, args, console)
    elif command == "resume":
        _cmd_resume(store, launcher, args, console)
    elif command in ("delete", "rm"):
        _cmd_delete(store, args, console)
    elif command == "export":
        _cmd_export(store, settings, args, console)


def main(argv: Optional[list[str]] = None) -> None:
    try:
        _main_impl(sys.argv[1:] if argv is None else argv)
    except CodexSessionsError as exc:
        sys.stderr.write(f"codex-sessions error: {exc}\n")
        sys.exit(1)
    except curses.error as exc:
        sys.stderr.write(f"codex-sessions error: cannot initialise the terminal: {exc}\n")
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
