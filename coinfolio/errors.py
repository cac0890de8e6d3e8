"""Error kinds raised by the Coinfolio core.

Every failure leaves the in-memory portfolio in its last-known-good state;
none of these are fatal to the process.
"""

from __future__ import annotations


class CoinfolioError(Exception):
    """Base class for all Coinfolio domain errors."""


class ValidationError(CoinfolioError, ValueError):
    """Bad coin identifier or quantity supplied by the user."""


class NotFoundError(CoinfolioError, LookupError):
    """Coin identifier not resolved by the market data API."""

    def __init__(self, coin_id: str) -> None:
        self.coin_id = coin_id
        super().__init__(f'Coin with ID "{coin_id}" not found')


class FetchError(CoinfolioError):
    """Network failure, timeout, or non-success API response.

    Safe to retry by re-invoking the operation.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DeserializationError(CoinfolioError, ValueError):
    """Persisted portfolio state could not be parsed."""


class BusyError(CoinfolioError):
    """A mutating operation was triggered while another is outstanding."""
