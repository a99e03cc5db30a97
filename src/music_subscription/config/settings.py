"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import PositiveFloat, RejoinAttempts, VolumeFloat, WebSocketCloseCode


class SupervisorSettings(BaseModel):
    """Reconnect and teardown policy for a voice connection.

    The defaults are product policy rather than protocol requirements.
    """

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    moved_channel_close_code: WebSocketCloseCode = 4014
    moved_channel_grace_s: PositiveFloat = Field(
        default=5.0,
        validation_alias=AliasChoices("moved_channel_grace_s", "moved_grace"),
    )
    reconnect_backoff_unit_s: PositiveFloat = Field(
        default=5.0,
        validation_alias=AliasChoices("reconnect_backoff_unit_s", "backoff_unit"),
    )
    max_rejoin_attempts: RejoinAttempts = Field(
        default=5,
        validation_alias=AliasChoices("max_rejoin_attempts", "max_rejoins"),
    )
    ready_timeout_s: PositiveFloat = Field(
        default=20.0,
        validation_alias=AliasChoices("ready_timeout_s", "ready_timeout"),
    )


class AudioSettings(BaseModel):
    """Audio playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: VolumeFloat = 0.5
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    ytdlp_format: str = "bestaudio/best"


class Settings(BaseSettings):
    """Application settings container.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - SUPERVISOR__READY_TIMEOUT_S, SUPERVISOR__MAX_REJOIN_ATTEMPTS, etc.
    - AUDIO__DEFAULT_VOLUME, AUDIO__YTDLP_FORMAT, etc.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    supervisor: SupervisorSettings = Field(default_factory=SupervisorSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
