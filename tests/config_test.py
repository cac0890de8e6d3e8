"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from coinfolio.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_DATA_DIR,
    DEFAULT_STORAGE_SLOT,
    Settings,
    get_settings,
)

_ENV_NAMES = (
    "COINFOLIO_API_BASE_URL",
    "COINFOLIO_VS_CURRENCY",
    "COINFOLIO_TIMEOUT_SECONDS",
    "COINFOLIO_API_KEY",
    "COINGECKO_API_KEY",
    "COINFOLIO_DATA_DIR",
    "COINFOLIO_STORAGE_SLOT",
    "COINFOLIO_SEARCH_LIMIT",
    "COINFOLIO_REFRESH_ON_LOAD",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


class TestSettingsFromEnv:
    """Tests for reading Settings from the environment."""

    def test_defaults(self):
        settings = Settings()
        assert settings.api_base_url == DEFAULT_API_BASE_URL
        assert settings.vs_currency == "usd"
        assert settings.timeout_seconds == pytest.approx(10.0)
        assert settings.api_key is None
        assert settings.data_dir == DEFAULT_DATA_DIR
        assert settings.storage_slot == DEFAULT_STORAGE_SLOT
        assert settings.search_limit == 25
        assert settings.refresh_on_load is True

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COINFOLIO_API_BASE_URL", "https://pro-api.coingecko.com/api/v3/")
        monkeypatch.setenv("COINFOLIO_VS_CURRENCY", "EUR")
        monkeypatch.setenv("COINFOLIO_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("COINGECKO_API_KEY", "abc")
        monkeypatch.setenv("COINFOLIO_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("COINFOLIO_STORAGE_SLOT", "test")
        monkeypatch.setenv("COINFOLIO_SEARCH_LIMIT", "5")
        monkeypatch.setenv("COINFOLIO_REFRESH_ON_LOAD", "no")

        settings = Settings()

        assert settings.api_base_url == "https://pro-api.coingecko.com/api/v3"
        assert settings.vs_currency == "eur"
        assert settings.timeout_seconds == pytest.approx(2.5)
        assert settings.api_key == "abc"
        assert settings.db_path == Path(tmp_path) / "portfolio.duckdb"
        assert settings.storage_slot == "test"
        assert settings.search_limit == 5
        assert settings.refresh_on_load is False

    def test_prefixed_api_key(self, monkeypatch):
        monkeypatch.setenv("COINFOLIO_API_KEY", "xyz")
        assert Settings().api_key == "xyz"

    def test_blank_api_key_is_none(self, monkeypatch):
        monkeypatch.setenv("COINGECKO_API_KEY", "")
        assert Settings().api_key is None

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("COINFOLIO_STORAGE_SLOT=from-dotenv\n", encoding="utf-8")
        assert Settings().storage_slot == "from-dotenv"

    def test_home_is_expanded(self, monkeypatch):
        monkeypatch.setenv("COINFOLIO_DATA_DIR", "~/coins")
        assert Settings().data_dir == Path.home() / "coins"

    @pytest.mark.parametrize(
        ("name", "value", "field"),
        [
            ("COINFOLIO_TIMEOUT_SECONDS", "soon", "timeout_seconds"),
            ("COINFOLIO_TIMEOUT_SECONDS", "0", "timeout_seconds"),
            ("COINFOLIO_SEARCH_LIMIT", "1.5", "search_limit"),
            ("COINFOLIO_SEARCH_LIMIT", "-1", "search_limit"),
            ("COINFOLIO_REFRESH_ON_LOAD", "maybe", "refresh_on_load"),
        ],
    )
    def test_invalid_values(self, monkeypatch, name, value, field):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError, match=field):
            Settings()

    def test_settings_are_frozen(self):
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.storage_slot = "other"


class TestGetSettings:
    """Tests for the cached accessor."""

    def test_cached(self, monkeypatch):
        get_settings.cache_clear()
        monkeypatch.setenv("COINFOLIO_STORAGE_SLOT", "first")
        first = get_settings()
        monkeypatch.setenv("COINFOLIO_STORAGE_SLOT", "second")
        assert get_settings() is first
        assert first.storage_slot == "first"
        get_settings.cache_clear()
