"""Runtime configuration.

Values come from the environment (``FRACTAL_`` prefix) or a local ``.env`` file.
Engine functions accept explicit overrides and only fall back to these defaults.
"""

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["debug", "info", "warning", "error"]
LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_LEVEL_ALIASES = {"warn": "warning", "critical": "error", "fatal": "error"}


def normalize_log_level(value: str) -> str:
    """``"WARN"`` -> ``"warning"``; other names are only lowercased."""
    name = value.strip().lower()
    return LOG_LEVEL_ALIASES.get(name, name)


class Settings(BaseSettings):
    """Engine and tool-surface settings."""

    model_config = SettingsConfigDict(
        env_prefix="FRACTAL_",
        env_file=".env",
        extra="ignore",
    )

    # Tool surface
    project_root: str = Field(default=".", description="Root that tool paths are resolved against")
    host: str = Field(default="127.0.0.1", description="Bind address for `fractal-prose serve`")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for `fractal-prose serve`")
    log_level: LogLevel = "info"

    # Engine defaults
    default_annotation_author: str = Field(default="author", min_length=1)
    wrap_column: int = Field(default=80, ge=20, description="Wrap column for summary comments")
    section_heading_level: int = Field(default=2, ge=1, le=6)
    summary_max_length: int | None = Field(
        default=None,
        ge=20,
        description="Truncate summaries synthesised during migration (unset = keep full text)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, value: Any) -> str:
        """Accept any case and common aliases; unknown names fall back to info."""
        if not isinstance(value, str):
            return "info"
        name = normalize_log_level(value)
        return name if name in LOG_LEVELS else "info"


settings = Settings()
