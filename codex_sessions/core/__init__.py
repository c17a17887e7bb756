"""Session store access: scanning, parsing, filtering, export and resume."""
