"""Export a session to a file whose format follows the destination suffix.

| suffix   | output                                   |
|----------|------------------------------------------|
| `.jsonl` | byte copy of the rollout                 |
| `.json`  | array of `{role, content}` records       |
| `.pdf`   | transcript, 40 lines per page            |
| other    | plain-text transcript                    |
"""

from __future__ import annotations

import json
import logging
import math
import shutil
import textwrap
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from fpdf import FPDF
from fpdf.errors import FPDFException

from codex_sessions.constants import (
    DOCUMENT_FONT,
    DOCUMENT_FONT_SIZE,
    DOCUMENT_LINE_HEIGHT_MM,
    DOCUMENT_MARGIN_MM,
    DOCUMENT_PAGE_LINES,
)
from codex_sessions.core.errors import CorruptSessionError, ExportError
from codex_sessions.core.event_log import parse_event_log
from codex_sessions.core.models import Entry

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 100


class ExportFormat(str, Enum):
    """Output variants, resolved once from the destination path."""

    RAW_COPY = "raw_copy"
    STRUCTURED = "structured"
    DOCUMENT = "document"
    PLAIN_TRANSCRIPT = "plain_transcript"


_SUFFIX_FORMATS = {
    ".jsonl": ExportFormat.RAW_COPY,
    ".json": ExportFormat.STRUCTURED,
    ".pdf": ExportFormat.DOCUMENT,
}


@dataclass(frozen=True)
class ExportResult:
    """What an export wrote."""

    format: ExportFormat
    destination: Path
    entry_count: int | None = None
    page_count: int | None = None


def resolve_format(destination: Path) -> ExportFormat:
    """Pick the export format from the destination suffix (case-insensitive)."""
    return _SUFFIX_FORMATS.get(destination.suffix.lower(), ExportFormat.PLAIN_TRANSCRIPT)


def render_entry(entry: Entry, width: int = DEFAULT_WIDTH) -> list[str]:
    """Render one entry as `role: content`, wrapped at `width`.

    Continuation lines are indented to align under the content.
    """
    prefix = f"{entry.role.value}: "
    indent = " " * len(prefix)
    paragraphs = entry.content.lstrip("\n").rstrip().splitlines() or [""]

    lines: list[str] = []
    for index, paragraph in enumerate(paragraphs):
        lead = prefix if index == 0 else indent
        wrapped = textwrap.wrap(
            paragraph,
            width=width,
            initial_indent=lead,
            subsequent_indent=indent,
            break_on_hyphens=False,
        )
        lines.extend(wrapped or [lead.rstrip()])
    return lines


def render_transcript(entries: Iterable[Entry], width: int = DEFAULT_WIDTH) -> list[str]:
    """Plain-text transcript lines, as shown in the browser preview."""
    lines: list[str] = []
    for entry in entries:
        lines.extend(render_entry(entry, width))
    return lines


def paginate(lines: Sequence[str], page_lines: int = DOCUMENT_PAGE_LINES) -> list[list[str]]:
    """Split transcript lines into pages of `page_lines` lines, in order."""
    page_count = math.ceil(len(lines) / page_lines)
    return [list(lines[i * page_lines : (i + 1) * page_lines]) for i in range(page_count)]


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1.
    return text.encode("latin-1", "replace").decode("latin-1")


def build_document(lines: Sequence[str], title: str = "Codex Session") -> FPDF:
    """Lay out transcript lines as a PDF, one page per `paginate` chunk."""
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_auto_page_break(auto=False)
    pdf.set_title(_latin1(title))
    pdf.set_creator("codex-sessions")
    pdf.set_font(DOCUMENT_FONT, size=DOCUMENT_FONT_SIZE)

    pages = paginate(lines)
    if not pages:
        # A PDF needs at least one page.
        pdf.add_page()
    for page in pages:
        pdf.add_page()
        y = DOCUMENT_MARGIN_MM
        for line in page:
            y += DOCUMENT_LINE_HEIGHT_MM
            if line.strip():
                pdf.text(DOCUMENT_MARGIN_MM, y, _latin1(line))
    return pdf


def _write_raw_copy(source: Path, destination: Path) -> ExportResult:
    shutil.copyfile(source, destination)
    return ExportResult(ExportFormat.RAW_COPY, destination)


def _write_structured(entries: list[Entry], destination: Path) -> ExportResult:
    records = [entry.to_dict() for entry in entries]
    with open(destination, "w", encoding="utf-8") as handle:
        json.dump(records, handle, indent=2, ensure_ascii=False)
        handle.write("\n")
    return ExportResult(ExportFormat.STRUCTURED, destination, entry_count=len(records))


def _write_document(entries: list[Entry], destination: Path, width: int, title: str) -> ExportResult:
    lines = render_transcript(entries, width)
    pdf = build_document(lines, title=title)
    pdf.output(str(destination))
    return ExportResult(ExportFormat.DOCUMENT, destination, entry_count=len(entries), page_count=pdf.page_no())


def _write_plain(entries: list[Entry], destination: Path, width: int) -> ExportResult:
    lines = render_transcript(entries, width)
    with open(destination, "w", encoding="utf-8") as handle:
        handle.write("\n".join(lines))
        if lines:
            handle.write("\n")
    return ExportResult(ExportFormat.PLAIN_TRANSCRIPT, destination, entry_count=len(entries))


def export_session(
    source: Path,
    destination: Path,
    *,
    width: int = DEFAULT_WIDTH,
    title: str | None = None,
) -> ExportResult:
    """Write one export file for the rollout at `source`.

    Overwrites `destination` and creates missing parent directories.

    Raises:
        ExportError: Parsing the source or writing the destination failed.
    """
    destination = destination.expanduser()
    export_format = resolve_format(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)

        if export_format is ExportFormat.RAW_COPY:
            result = _write_raw_copy(source, destination)
        else:
            entries = parse_event_log(source).entries
            if export_format is ExportFormat.STRUCTURED:
                result = _write_structured(entries, destination)
            elif export_format is ExportFormat.DOCUMENT:
                result = _write_document(entries, destination, width, title or f"Session {source.stem}")
            else:
                result = _write_plain(entries, destination, width)
    except CorruptSessionError as exc:
        raise ExportError(str(exc)) from exc
    except (OSError, UnicodeError, FPDFException) as exc:
        reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
        raise ExportError(f"failed to write {destination}: {reason}") from exc

    logger.info("Exported %s to %s as %s", source, destination, export_format.value)
    return result
