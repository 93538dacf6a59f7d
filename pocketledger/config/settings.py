"""
Configuration Management for pocketledger

Uses pydantic-settings for type-safe configuration from environment
variables (prefix POCKETLEDGER_) and an optional .env file.

DESIGN DECISION: All configuration is centralized here. The store and
session never read the environment themselves; they receive collaborators
built from these settings.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage
    data_dir: Path = Field(
        default=Path.home() / ".pocketledger",
        description="Directory holding the persisted partitions"
    )
    storage_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per write before a save is reported as failed"
    )
    storage_retry_max_wait: float = Field(
        default=2.0,
        ge=0.0,
        description="Upper bound in seconds between write attempts"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the structured log"
    )

    # Default miscellaneous budget
    misc_budget_name: str = Field(default="Miscellaneous")
    misc_budget_icon: str = Field(default="ellipsis.circle.fill")
    misc_budget_color: str = Field(default="gray")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
