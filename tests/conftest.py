"""Shared pytest fixtures for Coinfolio tests."""

from __future__ import annotations

from typing import Any

import pytest

from coinfolio.config import Settings
from coinfolio.portfolio.holding import Holding
from coinfolio.store.connection import init_memory_db


class RecordingFetch:
    """Fake market data client that records every call.

    Returns the configured records filtered to the requested ids, or
    raises ``error`` when set.
    """

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records = records or []
        self.calls: list[list[str]] = []
        self.error: Exception | None = None

    def __call__(self, coin_ids: list[str]) -> list[dict[str, Any]]:
        self.calls.append(list(coin_ids))
        if self.error is not None:
            raise self.error
        return [r for r in self.records if r["id"] in coin_ids]


def market_record(
    coin_id: str,
    price: float,
    change: float = 0.0,
    name: str | None = None,
    symbol: str | None = None,
) -> dict[str, Any]:
    """Build a normalized market record."""
    return {
        "id": coin_id,
        "name": name or coin_id.capitalize(),
        "symbol": symbol or coin_id[:3],
        "image": f"https://assets.example/{coin_id}.png",
        "current_price": price,
        "price_change_percentage_24h": change,
    }


@pytest.fixture
def db():
    conn = init_memory_db()
    yield conn
    conn.close()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment, with startup refresh off."""
    return Settings(
        api_base_url="https://api.test/v3",
        vs_currency="usd",
        timeout_seconds=10.0,
        api_key=None,
        data_dir=tmp_path,
        storage_slot="cryptoPortfolio",
        search_limit=25,
        refresh_on_load=False,
    )


@pytest.fixture
def bitcoin_record() -> dict[str, Any]:
    return market_record("bitcoin", 50000.0, 1.2, name="Bitcoin", symbol="btc")


@pytest.fixture
def ethereum_record() -> dict[str, Any]:
    return market_record("ethereum", 3000.0, -2.5, name="Ethereum", symbol="eth")


@pytest.fixture
def bitcoin(bitcoin_record) -> Holding:
    return Holding.from_market(bitcoin_record, 2.5)


@pytest.fixture
def ethereum(ethereum_record) -> Holding:
    return Holding.from_market(ethereum_record, 10.0)
