"""Tests for configuration loading."""

import pytest
from pathlib import Path

from pydantic import ValidationError

from spendquest.config import (
    AppSettings,
    CalendarSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)
from spendquest.orchestrator import create_store
from spendquest.services.storage import FileKeyValueStore, InMemoryKeyValueStore


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for the settings classes."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SPENDQUEST_STORAGE_BACKEND", raising=False)
        monkeypatch.delenv("SPENDQUEST_CALENDAR_FIRST_WEEKDAY", raising=False)

        assert StorageSettings().backend == "file"
        assert StorageSettings().data_dir == Path("data")
        assert CalendarSettings().first_weekday is None
        assert CalendarSettings().trend_days == 30

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SPENDQUEST_STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("SPENDQUEST_CALENDAR_FIRST_WEEKDAY", "6")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert StorageSettings().data_dir == tmp_path
        assert CalendarSettings().first_weekday == 6
        assert AppSettings().log_level == "DEBUG"

    def test_invalid_weekday_is_rejected(self, monkeypatch):
        monkeypatch.setenv("SPENDQUEST_CALENDAR_FIRST_WEEKDAY", "9")
        with pytest.raises(ValidationError):
            CalendarSettings()

    def test_validate_all_settings_reports_broken_section(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        results = validate_all_settings()

        assert results["storage"] is True
        assert results["calendar"] is True
        assert results["app"] is False
        assert "LOUD" in results["app_error"]

    def test_create_store_follows_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SPENDQUEST_STORAGE_BACKEND", "memory")
        assert isinstance(create_store(get_settings()), InMemoryKeyValueStore)

        monkeypatch.setenv("SPENDQUEST_STORAGE_BACKEND", "file")
        monkeypatch.setenv("SPENDQUEST_STORAGE_DATA_DIR", str(tmp_path))
        store = create_store(get_settings())
        assert isinstance(store, FileKeyValueStore)
        assert store.directory == tmp_path
