"""Tests for settings loading."""

import pytest

from photo_report.config import MAX_FILE_COUNT, Settings


def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.max_file_count == MAX_FILE_COUNT
    assert settings.max_concurrent_uploads == 3
    assert settings.max_cache_size == 50
    assert settings.thumbnail_size == 64


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PHOTO_REPORT_MAX_FILE_COUNT", "12")
    monkeypatch.setenv("PHOTO_REPORT_LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.max_file_count == 12
    assert settings.log_level == "DEBUG"
