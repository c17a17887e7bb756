"""Command line and terminal UI for codex-sessions."""
