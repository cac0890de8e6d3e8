"""Holding model — one user-owned quantity of a tracked coin.

A portfolio is an ordered ``tuple`` of holdings. Holdings are frozen;
every change produces a new instance via ``dataclasses.replace``.

"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from typing import Any

# Serialized field order, fixed so saved payloads are byte-stable
HOLDING_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "symbol",
    "image",
    "current_price",
    "quantity",
    "price_change_percentage_24h",
)


@dataclass(frozen=True)
class Holding:
    """A single coin position with cached display and price metadata.

    Attributes:
        id: CoinGecko coin identifier (stable key).
        name: Display name, e.g. "Bitcoin".
        symbol: Ticker symbol, e.g. "btc".
        image: Logo URL.
        current_price: Latest known unit price in the quote currency.
        quantity: Amount owned. Only changed by explicit user actions.
        price_change_percentage_24h: Latest 24h change in percent points.

    """

    id: str
    name: str
    symbol: str
    image: str
    current_price: float
    quantity: float
    price_change_percentage_24h: float = 0.0

    @classmethod
    def from_market(cls, record: dict[str, Any], quantity: float) -> Holding:
        """Create a holding from a fetched market record."""
        return cls(
            id=record["id"],
            name=record.get("name", ""),
            symbol=record.get("symbol", ""),
            image=record.get("image", ""),
            current_price=float(record["current_price"]),
            quantity=quantity,
            price_change_percentage_24h=float(record.get("price_change_percentage_24h", 0.0)),
        )

    def with_market(self, record: dict[str, Any]) -> Holding:
        """Return a copy with every market field replaced from ``record``.

        ``id`` and ``quantity`` are never taken from market data.
        """
        return replace(
            self,
            name=record.get("name", ""),
            symbol=record.get("symbol", ""),
            image=record.get("image", ""),
            current_price=float(record["current_price"]),
            price_change_percentage_24h=float(record.get("price_change_percentage_24h", 0.0)),
        )

    def with_quantity(self, quantity: float) -> Holding:
        """Return a copy holding ``quantity`` units."""
        return replace(self, quantity=quantity)

    @property
    def value(self) -> float:
        """Market value of this position."""
        return self.current_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict in ``HOLDING_FIELDS`` order."""
        data = asdict(self)
        return {key: data[key] for key in HOLDING_FIELDS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Holding:
        """Deserialize from a plain dict.

        Raises:
            KeyError: If a required field is missing.
            TypeError: If a numeric field holds a non-numeric value.
            ValueError: If the id is empty or not a string, a numeric
                field is out of range, the price is negative, or the
                quantity is not positive.

        """
        coin_id = data["id"]
        if not isinstance(coin_id, str) or not coin_id.strip():
            msg = f"id must be a non-empty string, got {coin_id!r}"
            raise ValueError(msg)
        quantity = _as_float(data["quantity"], "quantity")
        if quantity <= 0:
            msg = f"quantity must be > 0, got {quantity}"
            raise ValueError(msg)
        current_price = _as_float(data["current_price"], "current_price")
        if current_price < 0:
            msg = f"current_price must be >= 0, got {current_price}"
            raise ValueError(msg)
        return cls(
            id=coin_id,
            name=str(data.get("name", "")),
            symbol=str(data.get("symbol", "")),
            image=str(data.get("image", "")),
            current_price=current_price,
            quantity=quantity,
            price_change_percentage_24h=_as_float(
                data.get("price_change_percentage_24h", 0.0),
                "price_change_percentage_24h",
            ),
        )


def _as_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{field_name} must be a number, got {value!r}"
        raise TypeError(msg)
    try:
        number = float(value)
    except OverflowError as exc:
        msg = f"{field_name} is out of range"
        raise ValueError(msg) from exc
    if not math.isfinite(number):
        msg = f"{field_name} must be finite, got {value!r}"
        raise ValueError(msg)
    return number
