"""Portfolio session — the presentation layer's handle on the portfolio.

Holds the single in-memory portfolio reference, persists it after every
successful mutation, and records one user-facing error message when an
operation fails. Mutations are guarded by a busy flag: a second mutation
triggered while one is outstanding is rejected instead of racing the
first one to the store.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING, Any

from coinfolio.config import Settings, get_settings
from coinfolio.errors import BusyError, FetchError, NotFoundError, ValidationError
from coinfolio.market.coingecko import fetch_market_data, search_coins
from coinfolio.portfolio import reconciliation, valuation
from coinfolio.store.portfolio_store import clear_portfolio, load_portfolio, save_portfolio

if TYPE_CHECKING:
    import duckdb

    from coinfolio.portfolio.holding import Holding
    from coinfolio.portfolio.reconciliation import FetchMarketData

logger = logging.getLogger(__name__)

SearchCoins = Callable[[str], list[dict[str, Any]]]

ADD_FAILED_MESSAGE = "Failed to fetch coin data"
REFRESH_FAILED_MESSAGE = "Failed to refresh portfolio data"
SEARCH_FAILED_MESSAGE = "Failed to search coins"
BUSY_MESSAGE = "Another portfolio operation is in progress"


class PortfolioSession:
    """Owns the portfolio state for one user.

    Args:
        conn: DuckDB connection with the Coinfolio schema.
        settings: Configuration. Defaults to ``get_settings()``.
        fetch: Market data callable. Defaults to CoinGecko.
        search: Coin search callable. Defaults to CoinGecko.

    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        settings: Settings | None = None,
        fetch: FetchMarketData | None = None,
        search: SearchCoins | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._conn = conn
        self._fetch = fetch or partial(fetch_market_data, settings=self.settings)
        self._search = search or partial(search_coins, settings=self.settings)
        self.portfolio: tuple[Holding, ...] = ()
        self.busy = False
        self.last_error: str | None = None
        self.last_updated: datetime | None = None

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        if self.busy:
            self.last_error = BUSY_MESSAGE
            raise BusyError(BUSY_MESSAGE)
        self.busy = True
        self.last_error = None
        try:
            yield
        finally:
            self.busy = False

    def _commit(self, portfolio: tuple[Holding, ...]) -> tuple[Holding, ...]:
        # In-memory state only moves once the store has accepted the write
        save_portfolio(self._conn, portfolio, self.settings.storage_slot)
        self.portfolio = portfolio
        self.last_updated = datetime.now(tz=UTC)
        return portfolio

    def load(self) -> tuple[Holding, ...]:
        """Load saved state, then refresh prices if configured to.

        A failed refresh keeps the loaded portfolio and sets
        ``last_error``.
        """
        self.portfolio = load_portfolio(self._conn, self.settings.storage_slot)
        if self.portfolio and self.settings.refresh_on_load:
            try:
                self.refresh()
            except FetchError:
                logger.warning("Startup refresh failed; showing cached prices")
        return self.portfolio

    def add(self, coin_id: str, quantity: Any) -> tuple[Holding, ...]:
        """Add a quantity of a coin, merging with an existing holding.

        Raises:
            BusyError: If another mutation is outstanding.
            ValidationError: If the id or quantity is invalid.
            NotFoundError: If the coin is unknown.
            FetchError: If the market data request fails.

        """
        with self._mutation():
            try:
                updated = reconciliation.add_holding(self.portfolio, coin_id, quantity, self._fetch)
            except (ValidationError, NotFoundError) as exc:
                self.last_error = str(exc)
                raise
            except FetchError:
                logger.exception("Error adding coin %s", coin_id)
                self.last_error = ADD_FAILED_MESSAGE
                raise
            return self._commit(updated)

    def refresh(self, coin_ids: Iterable[str] | None = None) -> tuple[Holding, ...]:
        """Refresh market data for held coins.

        An empty portfolio is returned without fetching or saving.

        Raises:
            BusyError: If another mutation is outstanding.
            FetchError: If the market data request fails.

        """
        with self._mutation():
            if not self.portfolio:
                return self.portfolio
            try:
                updated = reconciliation.refresh_all(self.portfolio, self._fetch, coin_ids)
            except FetchError:
                logger.exception("Error refreshing portfolio")
                self.last_error = REFRESH_FAILED_MESSAGE
                raise
            return self._commit(updated)

    def remove(self, coin_id: str) -> tuple[Holding, ...]:
        """Remove a coin. Removing an absent coin is a no-op.

        Raises:
            BusyError: If another mutation is outstanding.

        """
        with self._mutation():
            return self._commit(reconciliation.remove_holding(self.portfolio, coin_id))

    def clear(self) -> tuple[Holding, ...]:
        """Drop every holding and delete the stored slot.

        Raises:
            BusyError: If another mutation is outstanding.

        """
        with self._mutation():
            clear_portfolio(self._conn, self.settings.storage_slot)
            self.portfolio = ()
            self.last_updated = datetime.now(tz=UTC)
            return self.portfolio

    def total_value(self) -> float:
        """Current total market value of the portfolio."""
        return valuation.total_value(self.portfolio)

    def summary(self) -> dict[str, Any]:
        """Dashboard summary of the current portfolio."""
        return valuation.summarize(
            self.portfolio,
            as_of=self.last_updated,
            currency=self.settings.vs_currency.upper(),
        )

    def search(self, query: str) -> list[dict[str, Any]]:
        """Search for coins to add. Does not touch portfolio state.

        Raises:
            FetchError: If the search request fails.

        """
        try:
            return self._search(query)
        except FetchError:
            logger.exception("Error searching coins for %r", query)
            self.last_error = SEARCH_FAILED_MESSAGE
            raise
