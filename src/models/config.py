"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    progress_dir: str = "data/progress"
    log_level: str = "INFO"
    batch_size: int = 5
    item_delay_seconds: float = 0.1
    chunk_delay_seconds: float = 1.0
    poll_interval_seconds: float = 2.0
    stale_after_seconds: float = 600.0
    snapshot_max_age_seconds: float = 86400.0

    @field_validator("progress_dir")
    @classmethod
    def validate_progress_dir(cls, value: str) -> str:
        """Progress directory must be non-empty."""
        if not value.strip():
            msg = "progress_dir must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, value: int) -> int:
        """Batch size must be between 1 and 1000."""
        if value < 1 or value > 1000:
            msg = "batch_size must be between 1 and 1000"
            raise ValueError(msg)
        return value

    @field_validator("item_delay_seconds", "chunk_delay_seconds")
    @classmethod
    def validate_delay(cls, value: float) -> float:
        """Pacing delays must not be negative."""
        if value < 0:
            msg = "pacing delays must be zero or positive"
            raise ValueError(msg)
        return value

    @field_validator("poll_interval_seconds")
    @classmethod
    def validate_poll_interval(cls, value: float) -> float:
        """Poll interval must be at least 0.5 seconds."""
        if value < 0.5:
            msg = "poll_interval_seconds must be at least 0.5"
            raise ValueError(msg)
        return value

    @field_validator("stale_after_seconds", "snapshot_max_age_seconds")
    @classmethod
    def validate_age_limit(cls, value: float) -> float:
        """Age limits must be positive."""
        if value <= 0:
            msg = "age limits must be greater than 0"
            raise ValueError(msg)
        return value
