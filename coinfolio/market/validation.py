"""Market record validation.

Checks normalized CoinGecko market records before they reach the
reconciler. Validation operates on plain dicts, the exchange format
between the client and the portfolio layer.

"""

from __future__ import annotations

import logging
import math
from typing import Any

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def validate_market_record(record: dict[str, Any]) -> list[str]:
    """Check a single market record for integrity issues.

    Args:
        record: Dict with keys: id, name, symbol, image, current_price,
            price_change_percentage_24h.

    Returns:
        List of human-readable issue strings. Empty if the record is valid.

    """
    issues: list[str] = []

    coin_id = record.get("id")
    if not isinstance(coin_id, str) or not coin_id.strip():
        issues.append("id must be a non-empty string")

    price = record.get("current_price")
    if not _is_number(price):
        issues.append(f"current_price is not a finite number: {price!r}")
    elif price < 0:
        issues.append(f"current_price is negative: {price}")

    change = record.get("price_change_percentage_24h")
    if not _is_number(change):
        issues.append(f"price_change_percentage_24h is not a finite number: {change!r}")

    return issues


def filter_valid_records(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop records that fail validation, logging each one.

    Args:
        records: Normalized market records.

    Returns:
        The records with no validation issues, in their original order.

    """
    valid: list[dict[str, Any]] = []
    for record in records:
        issues = validate_market_record(record)
        if issues:
            logger.warning(
                "Dropping market record %s: %s",
                record.get("id", "<unknown>"),
                "; ".join(issues),
            )
            continue
        valid.append(record)
    return valid
