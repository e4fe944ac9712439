"""Configuration package."""

from spendquest.config.settings import (
    AppSettings,
    CalendarSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "CalendarSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
