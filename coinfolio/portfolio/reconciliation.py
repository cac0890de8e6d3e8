"""Portfolio reconciliation — merge market data into held positions.

Every operation takes the current portfolio and returns a new one; the
input is never modified. User-entered quantities survive every refresh,
and holdings keep their insertion order.

The market data client is injected as a ``fetch`` callable taking a list
of coin ids and returning market records (see
``coinfolio.market.coingecko.fetch_market_data``). Any ``FetchError`` it
raises propagates unchanged, so a failed fetch never produces a partial
merge.

"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from typing import Any

from coinfolio.errors import NotFoundError, ValidationError
from coinfolio.portfolio.holding import Holding
from coinfolio.portfolio.valuation import total_value

logger = logging.getLogger(__name__)

FetchMarketData = Callable[[list[str]], list[dict[str, Any]]]

__all__ = [
    "FetchMarketData",
    "add_holding",
    "merge_market_data",
    "refresh_all",
    "remove_holding",
    "total_value",
    "validate_coin_id",
    "validate_quantity",
]


def validate_coin_id(coin_id: Any) -> str:
    """Check that a coin id is a non-empty string.

    Returns:
        The id with surrounding whitespace removed.

    Raises:
        ValidationError: If the id is empty or not a string.

    """
    if not isinstance(coin_id, str) or not coin_id.strip():
        msg = "Please select a coin"
        raise ValidationError(msg)
    return coin_id.strip()


def validate_quantity(quantity: Any) -> float:
    """Check that a quantity is a finite number greater than zero.

    Numeric strings (e.g. form input) are accepted.

    Raises:
        ValidationError: If the quantity is missing, non-numeric,
            non-finite, or not positive.

    """
    if isinstance(quantity, bool):
        msg = "Please enter a valid quantity"
        raise ValidationError(msg)
    try:
        value = float(quantity)
    except (TypeError, ValueError) as exc:
        msg = "Please enter a valid quantity"
        raise ValidationError(msg) from exc
    if not math.isfinite(value) or value <= 0:
        msg = "Please enter a valid quantity"
        raise ValidationError(msg)
    return value


def _find(portfolio: tuple[Holding, ...], coin_id: str) -> Holding | None:
    return next((h for h in portfolio if h.id == coin_id), None)


def add_holding(
    portfolio: tuple[Holding, ...],
    coin_id: str,
    quantity: float,
    fetch: FetchMarketData,
) -> tuple[Holding, ...]:
    """Add ``quantity`` of a coin to the portfolio.

    If the coin is already held its quantity is increased and nothing
    else changes; no market data is fetched. Otherwise the coin is looked
    up and appended as a new holding.

    Args:
        portfolio: Current holdings.
        coin_id: CoinGecko coin identifier.
        quantity: Amount to add, > 0.
        fetch: Market data client callable.

    Returns:
        The updated portfolio.

    Raises:
        ValidationError: If ``coin_id`` or ``quantity`` is invalid.
        NotFoundError: If the market data client does not know the coin.
        FetchError: If the market data request fails.

    """
    coin_id = validate_coin_id(coin_id)
    amount = validate_quantity(quantity)

    existing = _find(portfolio, coin_id)
    if existing is not None:
        updated = existing.with_quantity(existing.quantity + amount)
        logger.info("Increased %s by %s to %s", coin_id, amount, updated.quantity)
        return tuple(updated if h.id == coin_id else h for h in portfolio)

    records = fetch([coin_id])
    record = next((r for r in records if r.get("id") == coin_id), None)
    if record is None:
        raise NotFoundError(coin_id)

    logger.info("Added %s %s at %s", amount, coin_id, record["current_price"])
    return (*portfolio, Holding.from_market(record, amount))


def merge_market_data(
    portfolio: tuple[Holding, ...],
    records: Iterable[dict[str, Any]],
) -> tuple[Holding, ...]:
    """Merge fetched market records into existing holdings.

    Holdings with a matching record get every market field replaced;
    holdings without one are kept as they are. Records for coins not in
    the portfolio are ignored. Order and quantities are preserved.

    Args:
        portfolio: Current holdings.
        records: Market records keyed by their ``id`` field.

    Returns:
        The merged portfolio.

    """
    by_id: dict[str, dict[str, Any]] = {}
    for record in records:
        by_id.setdefault(record["id"], record)

    stale = [h.id for h in portfolio if h.id not in by_id]
    if stale:
        logger.warning("No fresh market data for %s; keeping cached values", ", ".join(stale))

    return tuple(h.with_market(by_id[h.id]) if h.id in by_id else h for h in portfolio)


def refresh_all(
    portfolio: tuple[Holding, ...],
    fetch: FetchMarketData,
    coin_ids: Iterable[str] | None = None,
) -> tuple[Holding, ...]:
    """Refresh market data for held coins.

    Args:
        portfolio: Current holdings.
        fetch: Market data client callable.
        coin_ids: Ids to refresh. Defaults to every held coin.

    Returns:
        The refreshed portfolio. An empty portfolio is returned as-is
        without fetching.

    Raises:
        FetchError: If the market data request fails.

    """
    if not portfolio:
        return portfolio

    ids = list(dict.fromkeys(coin_ids if coin_ids is not None else (h.id for h in portfolio)))
    if not ids:
        return portfolio

    records = fetch(ids)
    logger.info("Refreshed %d of %d requested coins", len(records), len(ids))
    return merge_market_data(portfolio, records)


def remove_holding(
    portfolio: tuple[Holding, ...],
    coin_id: str,
) -> tuple[Holding, ...]:
    """Remove a coin from the portfolio. Absent ids are a no-op."""
    remaining = tuple(h for h in portfolio if h.id != coin_id)
    if len(remaining) != len(portfolio):
        logger.info("Removed %s", coin_id)
    return remaining
