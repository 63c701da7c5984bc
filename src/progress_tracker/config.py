"""Configuration management for the progress tracker."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    asana_token: str | None = Field(default=None, validation_alias="ASANA_TOKEN")
    asana_workspace_id: str = Field(default="8714041385240", validation_alias="ASANA_WORKSPACE_ID")
    asana_project_id: str = Field(default="1204316590307635", validation_alias="ASANA_PROJECT_ID")
    asana_base_url: str = Field(
        default="https://app.asana.com/api/1.0", validation_alias="ASANA_BASE_URL"
    )
    goals_path: Path = Field(default=Path("config/goals.yaml"), validation_alias="TRACKER_GOALS_PATH")
    static_dir: Path = Field(default=Path("public"), validation_alias="TRACKER_STATIC_DIR")
    log_level: str = Field(default="INFO", validation_alias="TRACKER_LOG_LEVEL")
    cache_ttl_seconds: float = Field(default=300.0, validation_alias="TRACKER_CACHE_TTL_SECONDS")
    rate_limit_requests: int = Field(default=50, validation_alias="TRACKER_RATE_LIMIT_REQUESTS")
    rate_limit_window_seconds: float = Field(
        default=60.0, validation_alias="TRACKER_RATE_LIMIT_WINDOW_SECONDS"
    )
    chunk_days: int = Field(default=7, validation_alias="TRACKER_CHUNK_DAYS")
    max_rate_limit_retries: int = Field(default=5, validation_alias="TRACKER_MAX_RATE_LIMIT_RETRIES")
    host: str = Field(default="127.0.0.1", validation_alias="TRACKER_HOST")
    port: int = Field(default=3000, validation_alias="TRACKER_PORT")

    @field_validator("asana_token", mode="before")
    @classmethod
    def _blank_token_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "TRACKER_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("cache_ttl_seconds", "rate_limit_window_seconds")
    @classmethod
    def _validate_positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Durations must be greater than zero seconds")
        return value

    @field_validator("rate_limit_requests", "chunk_days")
    @classmethod
    def _validate_at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("TRACKER_RATE_LIMIT_REQUESTS and TRACKER_CHUNK_DAYS must be >= 1")
        return value

    @field_validator("max_rate_limit_retries")
    @classmethod
    def _validate_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("TRACKER_MAX_RATE_LIMIT_RETRIES must be >= 0")
        return value


@lru_cache(maxsize=1)
def get_settings() -> TrackerSettings:
    """Return cached settings instance."""

    settings = TrackerSettings()
    settings.goals_path = settings.goals_path.expanduser().resolve()
    settings.static_dir = settings.static_dir.expanduser().resolve()
    return settings


__all__ = ["TrackerSettings", "get_settings"]
