"""Portfolio valuation — total value, allocation, and summary views.

Computes the aggregates the dashboard shows: per-holding market value,
the portfolio total, allocation weights, and the stats card.

"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

from coinfolio.portfolio.formatting import (
    format_currency,
    format_percentage,
    format_quantity,
    price_direction,
)
from coinfolio.portfolio.holding import Holding


def holding_value(holding: Holding) -> float:
    """Market value of a single holding (price × quantity)."""
    return holding.value


def total_value(portfolio: tuple[Holding, ...]) -> float:
    """Sum of ``current_price × quantity`` over all holdings.

    Returns 0.0 for an empty portfolio.
    """
    return math.fsum(holding_value(h) for h in portfolio)


def compute_allocation(portfolio: tuple[Holding, ...]) -> list[dict[str, Any]]:
    """Compute allocation weights per holding.

    Args:
        portfolio: Ordered holdings.

    Returns:
        List of dicts with keys: id, symbol, value, weight, in portfolio
        order. Weights sum to 1.0, or are all 0.0 when the portfolio is
        worth nothing.

    """
    total = total_value(portfolio)
    allocation: list[dict[str, Any]] = []
    for holding in portfolio:
        value = holding_value(holding)
        allocation.append(
            {
                "id": holding.id,
                "symbol": holding.symbol,
                "value": value,
                "weight": value / total if total > 0 else 0.0,
            }
        )
    return allocation


def summarize(
    portfolio: tuple[Holding, ...],
    as_of: datetime | None = None,
    currency: str = "USD",
) -> dict[str, Any]:
    """Build the dashboard summary for a portfolio.

    Args:
        portfolio: Ordered holdings.
        as_of: Timestamp of the last successful update. Defaults to now.
        currency: Quote currency code used for the display strings.

    Returns:
        Dict with keys: total_assets, total_value, total_value_display,
        last_updated (ISO-8601), holdings. Each holding row carries the
        holding fields plus value, weight, direction and ``*_display``
        strings for price, quantity, change and value.

    """
    stamp = as_of or datetime.now(tz=UTC)
    total = total_value(portfolio)
    rows: list[dict[str, Any]] = []
    for holding, share in zip(portfolio, compute_allocation(portfolio), strict=True):
        rows.append(
            {
                **holding.to_dict(),
                "value": share["value"],
                "weight": share["weight"],
                "direction": price_direction(holding.price_change_percentage_24h),
                "price_display": format_currency(holding.current_price, currency),
                "quantity_display": format_quantity(holding.quantity),
                "change_display": format_percentage(holding.price_change_percentage_24h),
                "value_display": format_currency(share["value"], currency),
            }
        )
    return {
        "total_assets": len(portfolio),
        "total_value": total,
        "total_value_display": format_currency(total, currency),
        "last_updated": stamp.isoformat(),
        "holdings": rows,
    }
