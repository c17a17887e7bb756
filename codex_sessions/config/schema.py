from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from codex_sessions.logging_config import LOG_LEVELS


class BrowserSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    codex_home: Optional[str] = None
    codex_bin: str = "codex"
    # Window in which the second key of a chord must arrive.
    chord_timeout_ms: int = Field(default=600, ge=50, le=5000)
    # Escape while filtering: "discard" clears the query, "restore" re-applies the last committed one.
    filter_cancel: Literal["discard", "restore"] = "discard"
    display_width: int = Field(default=100, ge=20, le=1000)
    preview_chars: int = Field(default=80, ge=10)
    head_lines: int = Field(default=50, ge=1)
    # Unset means CODEX_SESSIONS_LOG_LEVEL or INFO decides.
    log_level: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        """Accept standard logging level names in any case."""
        if v is None:
            return None
        normalized = v.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return normalized

    @property
    def chord_timeout_s(self) -> float:
        return self.chord_timeout_ms / 1000.0
