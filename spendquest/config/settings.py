"""
Configuration Management for SpendQuest

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself has no required configuration; every value has a default
so a ledger can be created without any environment set up.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value store backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPENDQUEST_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["file", "memory"] = Field(
        default="file",
        description="Which key-value store to use"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one file per stored key (file backend)"
    )


class CalendarSettings(BaseSettings):
    """Calendar rules used to resolve time windows."""

    model_config = SettingsConfigDict(
        env_prefix="SPENDQUEST_CALENDAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    first_weekday: Optional[int] = Field(
        default=None,
        ge=0,
        le=6,
        description="First day of the week (0 = Monday). Unset follows the host calendar"
    )
    trend_days: int = Field(
        default=30,
        ge=1,
        le=366,
        description="How many days back the daily spending trend covers"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for engine log lines"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept the standard logging level names."""
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so a broken section only fails on access

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def calendar(self) -> CalendarSettings:
        return CalendarSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, Any]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus {setting_name}_error
    for each section that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "calendar", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
