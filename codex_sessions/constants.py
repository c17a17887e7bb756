"""Constants used across codex-sessions.

Values here describe the upstream rollout layout and fixed rendering limits;
user-tunable values live in `codex_sessions.config.schema`.
"""

# Upstream rollout layout (owned by the Codex runtime)
SESSIONS_SUBDIR = "sessions"
ROLLOUT_PREFIX = "rollout-"
ROLLOUT_SUFFIX = ".jsonl"
ROLLOUT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"

# Preview extraction
PREVIEW_ELLIPSIS = "…"
SESSION_PREFIX_MARKERS = ("<environment_context>", "<user_instructions>")
INSTRUCTION_MARKERS = ("# AGENTS", "<INSTRUCTIONS>")

# Export
DOCUMENT_PAGE_LINES = 40  # Transcript lines per rendered document page
DOCUMENT_FONT = "Courier"
DOCUMENT_FONT_SIZE = 8
DOCUMENT_MARGIN_MM = 15
DOCUMENT_LINE_HEIGHT_MM = 6

# TUI loop
KEY_POLL_INTERVAL_MS = 100  # getch timeout; also the chord expiry resolution
