"""Parse Codex rollout logs into ordered entries.

A rollout is JSONL: one independently parseable record per line, usually
wrapped as ``{"timestamp", "type", "payload"}``. Only role and content are
extracted; unknown fields are ignored and undecodable lines are skipped with a
diagnostic, so a damaged log still yields everything that can be read.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from os import PathLike
from pathlib import Path
from typing import Mapping, cast

from codex_sessions.core.errors import CorruptSessionError, ParseDiagnostic
from codex_sessions.core.models import Entry, ParsedLog, Role

logger = logging.getLogger(__name__)

# Records that describe the session rather than the conversation.
_BOOKKEEPING_TYPES = frozenset({"session_meta", "turn_context", "event_msg", "compacted"})
# Response items that carry no readable conversation text.
_SILENT_ITEM_TYPES = frozenset({"reasoning"})
_ITEM_TYPES = frozenset(
    {
        "message",
        "reasoning",
        "function_call",
        "function_call_output",
        "custom_tool_call",
        "custom_tool_call_output",
    }
)
_TEXT_PART_TYPES = frozenset({"input_text", "output_text", "text"})
_ROLE_ALIASES: dict[str, Role] = {
    "user": Role.USER,
    "assistant": Role.ASSISTANT,
    "system": Role.SYSTEM,
    "developer": Role.SYSTEM,
    "tool": Role.TOOL,
}
# JSON escapes in the high or low surrogate range; a lone one survives json.loads.
_SURROGATE_ESCAPE = re.compile(r"\\u[dD][89a-fA-F][0-9a-fA-F]{2}")


class RecordDecodeError(ValueError):
    """A log line is not a JSON object."""


def scrub_text(text: str) -> str:
    """Replace lone surrogates with U+FFFD so the text can be encoded as UTF-8."""
    return text.encode("utf-8", "surrogatepass").decode("utf-8", "replace")


def _scrub(value: object) -> object:
    if isinstance(value, str):
        return scrub_text(value)
    if isinstance(value, list):
        return [_scrub(item) for item in value]
    if isinstance(value, dict):
        return {scrub_text(key): _scrub(item) for key, item in value.items()}
    return value


def decode_record(raw: bytes) -> dict[str, object]:  # guard: loose-dict - External JSONL unknown structure
    """Decode one raw log line into a JSON object.

    Strings in the result are always encodable as UTF-8.

    Raises:
        RecordDecodeError: The line is not UTF-8, not JSON, too deeply nested,
            or not an object.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RecordDecodeError(f"invalid utf-8 at byte {exc.start}") from exc
    try:
        value: object = json.loads(text)
        if _SURROGATE_ESCAPE.search(text):
            value = _scrub(value)
    except json.JSONDecodeError as exc:
        raise RecordDecodeError(f"invalid json: {exc.msg}") from exc
    except RecursionError as exc:
        raise RecordDecodeError("json nested too deeply") from exc
    if not isinstance(value, dict):
        raise RecordDecodeError(f"expected object, got {type(value).__name__}")
    return cast(dict[str, object], value)


def role_for(raw: object) -> Role:
    """Map a declared role or record type to a `Role`."""
    if not isinstance(raw, str):
        return Role.UNKNOWN
    return _ROLE_ALIASES.get(raw.strip().lower(), Role.UNKNOWN)


def flatten_content(content: object) -> str:
    """Join the text parts of a message content value."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    pieces: list[str] = []
    for part in content:
        if isinstance(part, str):
            pieces.append(part)
            continue
        if not isinstance(part, dict):
            continue
        part_type = part.get("type")
        if part_type in _TEXT_PART_TYPES:
            text = part.get("text")
            if isinstance(text, str):
                pieces.append(text)
        elif part_type == "input_image":
            pieces.append(f"[image: {part.get('image_url', '')}]")
    return "\n".join(pieces)


def _loose_text(value: object) -> str:
    """Best-effort text for records of unknown shape."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return flatten_content(value)
    if isinstance(value, dict):
        for key in ("content", "text", "message", "output"):
            if key in value:
                text = _loose_text(value[key])
                if text.strip():
                    return text
    return ""


def _tool_output_text(output: object) -> str:
    if isinstance(output, str):
        # Codex stores some tool outputs as a JSON string with an "output" field.
        try:
            decoded: object = json.loads(output)
        except (json.JSONDecodeError, RecursionError):
            return output
        if isinstance(decoded, dict) and isinstance(decoded.get("output"), str):
            return scrub_text(cast(str, decoded["output"]))
        return output
    return _loose_text(output)


def _item_role_and_text(item: Mapping[str, object]) -> tuple[Role, str] | None:
    item_type = item.get("type")
    if item_type in _SILENT_ITEM_TYPES:
        return None
    if item_type == "message":
        return role_for(item.get("role")), flatten_content(item.get("content"))
    if item_type in ("function_call", "custom_tool_call"):
        arguments = item.get("arguments", item.get("input", ""))
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments, ensure_ascii=False)
        return Role.TOOL, f"{item.get('name', 'tool')}({arguments})"
    if item_type in ("function_call_output", "custom_tool_call_output"):
        return Role.TOOL, _tool_output_text(item.get("output"))
    return Role.UNKNOWN, _loose_text(item)


def _record_role_and_text(record: Mapping[str, object]) -> tuple[Role, str] | None:
    kind = record.get("type")
    payload = record.get("payload")

    if kind == "response_item" and isinstance(payload, dict):
        return _item_role_and_text(cast(Mapping[str, object], payload))
    if kind in _BOOKKEEPING_TYPES:
        return None
    if kind in _ITEM_TYPES:
        # Older rollouts stored response items without the wrapper.
        return _item_role_and_text(record)

    message = record.get("message")
    if isinstance(message, dict) and "content" in message:
        return role_for(message.get("role", kind)), flatten_content(message.get("content"))
    if "role" in record and "content" in record:
        return role_for(record.get("role")), flatten_content(record.get("content"))

    source = payload if payload is not None else record
    return role_for(kind), _loose_text(source)


def entry_from_record(record: Mapping[str, object], line_index: int) -> Entry | None:
    """Build an entry from a decoded record, or None when it carries no text."""
    extracted = _record_role_and_text(record)
    if extracted is None:
        return None
    role, content = extracted
    if not content.strip():
        return None
    return Entry(role=role, content=content, line_index=line_index)


class EventLog:
    """Lazy, restartable view of a rollout's entries.

    Each iteration re-reads the file from the start and rebuilds
    `diagnostics` for that pass.
    """

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)
        self.diagnostics: list[ParseDiagnostic] = []

    def __iter__(self) -> Iterator[Entry]:
        try:
            handle = open(self.path, "rb")
        except OSError as exc:
            raise CorruptSessionError(f"cannot open {self.path}: {exc.strerror or exc}") from exc

        self.diagnostics = []
        with handle:
            for line_index, raw in enumerate(handle):
                if not raw.strip():
                    continue
                try:
                    record = decode_record(raw)
                except RecordDecodeError as exc:
                    self.diagnostics.append(ParseDiagnostic(line_index, str(exc)))
                    continue
                entry = entry_from_record(record, line_index)
                if entry is not None:
                    yield entry

        if self.diagnostics:
            logger.debug("Skipped %d malformed lines in %s", len(self.diagnostics), self.path)


def parse_event_log(path: str | PathLike[str]) -> ParsedLog:
    """Read a whole rollout.

    Raises:
        CorruptSessionError: The file cannot be opened.
    """
    log = EventLog(path)
    entries = list(log)
    return ParsedLog(entries=entries, diagnostics=list(log.diagnostics))
