"""Runtime configuration for Coinfolio.

Settings are read from ``COINFOLIO_*`` environment variables (and an
optional ``.env`` file), falling back to module defaults. The data
directory layout::

    ~/.coinfolio/
      data/
        portfolio.duckdb

"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://api.coingecko.com/api/v3"
DEFAULT_VS_CURRENCY = "usd"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_DATA_DIR = Path.home() / ".coinfolio" / "data"
DEFAULT_STORAGE_SLOT = "cryptoPortfolio"
DEFAULT_SEARCH_LIMIT = 25


class Settings(BaseSettings):
    """Application settings sourced from environment variables.

    Attributes:
        api_base_url: CoinGecko REST base URL.
        vs_currency: Quote currency for market prices.
        timeout_seconds: Per-request HTTP timeout.
        api_key: Optional CoinGecko demo API key (``COINGECKO_API_KEY``).
        data_dir: Directory holding the DuckDB file.
        storage_slot: Name of the slot the portfolio is saved under.
        search_limit: Maximum number of search results returned.
        refresh_on_load: Refresh prices right after loading saved state.

    """

    api_base_url: str = DEFAULT_API_BASE_URL
    vs_currency: str = DEFAULT_VS_CURRENCY
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("coingecko_api_key", "coinfolio_api_key"),
    )
    data_dir: Path = DEFAULT_DATA_DIR
    storage_slot: str = DEFAULT_STORAGE_SLOT
    search_limit: int = Field(default=DEFAULT_SEARCH_LIMIT, gt=0)
    refresh_on_load: bool = True

    model_config = SettingsConfigDict(
        env_prefix="COINFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("vs_currency")
    @classmethod
    def lowercase_currency(cls, value: str) -> str:
        return value.lower()

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("data_dir")
    @classmethod
    def expand_home(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def db_path(self) -> Path:
        """Path of the portfolio database file."""
        return self.data_dir / "portfolio.duckdb"


@lru_cache
def get_settings() -> Settings:
    """Cached accessor so settings are only loaded once per process."""
    return Settings()
