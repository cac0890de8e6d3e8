"""Display formatting for prices, percentages, and quantities."""

from __future__ import annotations

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}

_MAX_QUANTITY_DECIMALS = 8


def format_currency(value: float, currency: str = "USD") -> str:
    """Format a value as money with two decimals, e.g. ``$1,234.50``.

    Unknown currency codes are appended instead of prefixed
    (``1,234.50 CHF``).
    """
    code = currency.upper()
    amount = f"{abs(value):,.2f}"
    sign = "-" if round(value, 2) < 0 else ""
    symbol = _CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{amount} {code}"
    return f"{sign}{symbol}{amount}"


def format_percentage(value: float) -> str:
    """Format percent points with an explicit sign, e.g. ``+1.20%``.

    Zero (after rounding) is shown without a sign.
    """
    rounded = round(value, 2)
    if rounded == 0:
        return "0.00%"
    return f"{rounded:+.2f}%"


def format_quantity(value: float) -> str:
    """Format a quantity with separators and up to 8 decimals.

    Trailing zeros are trimmed: ``2.5``, ``1,000``, ``0.00000001``.
    """
    text = f"{value:,.{_MAX_QUANTITY_DECIMALS}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def price_direction(change_percent: float) -> str:
    """Classify a 24h change as ``"up"``, ``"down"`` or ``"flat"``."""
    if change_percent > 0:
        return "up"
    if change_percent < 0:
        return "down"
    return "flat"
