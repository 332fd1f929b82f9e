"""Application Settings and Configuration

Pydantic-based settings for the worker process. Values come from environment
variables (the supervisor injects ``DISCORD_TOKEN``, ``BOT_OWNER_ID``,
``IS_RUN_BY_RUNNER`` and ``RESTART_RECOVER_PATH``) with ``.env`` support and
defaults for everything else. Settings are frozen after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import (
    CommandPrefixStr,
    DiscordSnowflake,
    PageSize,
    PositiveFloat,
    VolumeFloat,
)


class PaginationSettings(BaseModel):
    """Interactive queue view configuration."""

    model_config = ConfigDict(frozen=True)

    page_size: PageSize = 10
    timeout_seconds: PositiveFloat = 120.0


class AudioSettings(BaseModel):
    """Audio playback configuration."""

    model_config = ConfigDict(frozen=True)

    default_volume: VolumeFloat = 0.5
    ffmpeg_before_options: str = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    ffmpeg_options: str = "-vn"
    ytdlp_format: str = "bestaudio/best"
    connect_timeout_seconds: PositiveFloat = 15.0


class RestartSettings(BaseModel):
    """Restart hand-over configuration."""

    model_config = ConfigDict(frozen=True)

    transfer_directory: Path | None = None
    replay_item_timeout_seconds: PositiveFloat = 30.0


class Settings(BaseSettings):
    """Worker settings container.

    Environment variable naming:
    - DISCORD_TOKEN, BOT_OWNER_ID, COMMAND_PREFIX, LOG_LEVEL (top-level)
    - SYNC_GUILD_IDS (JSON array of guild ids for instant slash-command sync)
    - IS_RUN_BY_RUNNER (presence marks a supervised worker; the value is ignored)
    - RESTART_RECOVER_PATH (transfer file to replay on startup)
    - PAGINATION__PAGE_SIZE, AUDIO__YTDLP_FORMAT, RESTART__REPLAY_ITEM_TIMEOUT_SECONDS, etc.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    discord_token: SecretStr = SecretStr("")
    bot_owner_id: DiscordSnowflake | None = None
    command_prefix: CommandPrefixStr = "!"
    sync_guild_ids: tuple[DiscordSnowflake, ...] = ()
    log_level: str = "INFO"

    is_run_by_runner: str | None = None
    restart_recover_path: Path | None = None

    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    restart: RestartSettings = Field(default_factory=RestartSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper

    @field_validator("bot_owner_id", "restart_recover_path", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_supervised(self) -> bool:
        return self.is_run_by_runner is not None

    @property
    def has_token(self) -> bool:
        return bool(self.discord_token.get_secret_value().strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded from:
    1. Environment variables
    2. .env file (if present)
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
