"""Unit tests for the export pipeline."""

import json
import math
from pathlib import Path

import pytest

from codex_sessions.core.errors import ExportError
from codex_sessions.core.export import (
    ExportFormat,
    build_document,
    export_session,
    paginate,
    render_entry,
    render_transcript,
    resolve_format,
)
from codex_sessions.core.models import Entry, Role
from tests.conftest import SESSION_A, assistant_message, session_meta, user_message


@pytest.fixture
def rollout(make_rollout) -> Path:
    return make_rollout(
        SESSION_A,
        [
            session_meta(SESSION_A),
            user_message("summarise the diff"),
            "{garbage",
            assistant_message("The diff renames the parser.\n\nNo behaviour changes."),
        ],
    )


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("out.jsonl", ExportFormat.RAW_COPY),
        ("out.JSON", ExportFormat.STRUCTURED),
        ("out.pdf", ExportFormat.DOCUMENT),
        ("out.txt", ExportFormat.PLAIN_TRANSCRIPT),
        ("out.md", ExportFormat.PLAIN_TRANSCRIPT),
        ("out", ExportFormat.PLAIN_TRANSCRIPT),
    ],
)
def test_resolve_format_by_suffix(name: str, expected: ExportFormat) -> None:
    assert resolve_format(Path(name)) is expected


def test_jsonl_export_is_byte_identical(rollout: Path, tmp_path: Path) -> None:
    destination = tmp_path / "out.jsonl"

    result = export_session(rollout, destination)

    assert result.format is ExportFormat.RAW_COPY
    assert destination.read_bytes() == rollout.read_bytes()


def test_json_export_has_one_record_per_entry(rollout: Path, tmp_path: Path) -> None:
    destination = tmp_path / "out.json"

    result = export_session(rollout, destination)

    records = json.loads(destination.read_text(encoding="utf-8"))
    assert result.entry_count == 2
    assert records == [
        {"role": "user", "content": "summarise the diff"},
        {"role": "assistant", "content": "The diff renames the parser.\n\nNo behaviour changes."},
    ]


def test_plain_export_writes_transcript(rollout: Path, tmp_path: Path) -> None:
    destination = tmp_path / "nested" / "dir" / "out.txt"

    result = export_session(rollout, destination, width=100)

    assert result.format is ExportFormat.PLAIN_TRANSCRIPT
    assert destination.read_text(encoding="utf-8").splitlines() == [
        "user: summarise the diff",
        "assistant: The diff renames the parser.",
        "",
        "           No behaviour changes.",
    ]


def test_pdf_export_page_count(make_rollout, tmp_path: Path) -> None:
    source = make_rollout(SESSION_A, [user_message(f"message {i}") for i in range(45)])
    destination = tmp_path / "out.pdf"

    result = export_session(source, destination)

    assert result.format is ExportFormat.DOCUMENT
    assert result.page_count == math.ceil(45 / 40)
    assert destination.read_bytes().startswith(b"%PDF")


@pytest.mark.parametrize(("line_count", "pages"), [(0, 1), (1, 1), (40, 1), (41, 2), (80, 2), (81, 3)])
def test_document_has_one_page_per_forty_lines(line_count: int, pages: int) -> None:
    document = build_document([f"line {i}" for i in range(line_count)])

    assert document.page_no() == pages


def test_document_tolerates_non_latin_text() -> None:
    document = build_document(["user: héllo ☃ 日本"])

    assert document.page_no() == 1


def test_paginate_preserves_order() -> None:
    lines = [str(i) for i in range(95)]

    pages = paginate(lines)

    assert [len(page) for page in pages] == [40, 40, 15]
    assert [line for page in pages for line in page] == lines
    assert paginate([]) == []


def test_render_entry_wraps_with_hanging_indent() -> None:
    entry = Entry(Role.USER, "word " * 30, 0)

    lines = render_entry(entry, width=40)

    assert lines[0].startswith("user: word")
    assert all(len(line) <= 40 for line in lines)
    assert all(line.startswith(" " * len("user: ")) for line in lines[1:])
    assert " ".join(line.strip() for line in lines) == "user: " + " ".join(["word"] * 30)


def test_render_transcript_concatenates_entries() -> None:
    entries = [Entry(Role.USER, "a\nb", 0), Entry(Role.TOOL, "ls()", 1)]

    assert render_transcript(entries) == ["user: a", "      b", "tool: ls()"]


def test_export_to_directory_fails(rollout: Path, tmp_path: Path) -> None:
    blocked = tmp_path / "taken.txt"
    blocked.mkdir()

    with pytest.raises(ExportError, match="failed to write"):
        export_session(rollout, blocked)


def test_export_of_missing_source_fails(tmp_path: Path) -> None:
    with pytest.raises(ExportError):
        export_session(tmp_path / "gone.jsonl", tmp_path / "out.json")
    with pytest.raises(ExportError):
        export_session(tmp_path / "gone.jsonl", tmp_path / "out.jsonl")


@pytest.mark.parametrize("name", ["out.json", "out.txt", "out.pdf"])
def test_export_replaces_lone_surrogates(make_rollout, tmp_path: Path, name: str) -> None:
    source = make_rollout(
        SESSION_A,
        ['{"type":"response_item","payload":{"type":"message","role":"user","content":"emoji \\ud83d half"}}'],
    )
    destination = tmp_path / name

    result = export_session(source, destination)

    assert result.entry_count == 1
    if name == "out.json":
        (record,) = json.loads(destination.read_text(encoding="utf-8"))
        assert record["content"].startswith("emoji �")
