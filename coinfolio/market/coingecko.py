"""CoinGecko market data adapter.

Fetches current prices and coin metadata, and resolves free-text
searches to coin identifiers, via the public CoinGecko REST API.

Note:
    The public API is rate limited (roughly 30 calls per minute without
    a key). A demo key can be supplied through ``COINGECKO_API_KEY``;
    it is sent as the ``x-cg-demo-api-key`` header.

"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from coinfolio.config import Settings, get_settings
from coinfolio.errors import FetchError
from coinfolio.market.validation import filter_valid_records

logger = logging.getLogger(__name__)

USER_AGENT = "coinfolio/0.1"


def _get_json(
    path: str,
    params: dict[str, str],
    settings: Settings,
) -> Any:
    """Issue a GET request and decode the JSON body.

    Args:
        path: Endpoint path relative to the API base URL.
        params: Query string parameters.
        settings: Resolved configuration (base URL, timeout, key).

    Returns:
        The decoded JSON payload.

    Raises:
        FetchError: On timeout, transport failure, non-success status,
            or a body that is not valid JSON.

    """
    url = f"{settings.api_base_url}/{path}"
    headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    if settings.api_key:
        headers["x-cg-demo-api-key"] = settings.api_key

    logger.debug("HTTP GET %s %s", url, params)
    try:
        response = httpx.get(
            url,
            params=params,
            headers=headers,
            timeout=settings.timeout_seconds,
        )
    except httpx.TimeoutException as exc:
        msg = f"CoinGecko request timed out after {settings.timeout_seconds}s"
        raise FetchError(msg) from exc
    except httpx.HTTPError as exc:
        msg = f"CoinGecko request failed: {exc}"
        raise FetchError(msg) from exc

    if not response.is_success:
        msg = f"API request failed with status {response.status_code}"
        raise FetchError(msg, status_code=response.status_code)

    try:
        return response.json()
    except ValueError as exc:
        msg = "CoinGecko returned a malformed JSON body"
        raise FetchError(msg, status_code=response.status_code) from exc


def _normalize_market_record(raw: dict[str, Any]) -> dict[str, Any]:
    """Map a /coins/markets entry onto the holding field set."""
    price = raw.get("current_price")
    change = raw.get("price_change_percentage_24h")
    return {
        "id": raw.get("id"),
        "name": raw.get("name") or "",
        "symbol": raw.get("symbol") or "",
        "image": raw.get("image") or "",
        "current_price": 0.0 if price is None else price,
        "price_change_percentage_24h": 0.0 if change is None else change,
    }


def fetch_market_data(
    coin_ids: list[str],
    *,
    settings: Settings | None = None,
) -> list[dict[str, Any]]:
    """Fetch current market data for a set of coins.

    Args:
        coin_ids: CoinGecko coin identifiers (e.g., "bitcoin", "ethereum").
            Duplicates are collapsed, first occurrence wins.
        settings: Configuration override. Defaults to ``get_settings()``.

    Returns:
        List of dicts with keys: id, name, symbol, image, current_price,
        price_change_percentage_24h. Unknown ids are simply absent.
        Empty list (and no request) if ``coin_ids`` is empty.

    Raises:
        FetchError: If the request fails or the response is not a list.

    """
    ids = list(dict.fromkeys(cid.strip() for cid in coin_ids if cid and cid.strip()))
    if not ids:
        return []

    cfg = settings or get_settings()
    payload = _get_json(
        "coins/markets",
        {
            "vs_currency": cfg.vs_currency,
            "ids": ",".join(ids),
            "order": "market_cap_desc",
            "sparkline": "false",
            "price_change_percentage": "24h",
        },
        cfg,
    )

    if not isinstance(payload, list):
        msg = "Unexpected response shape from coins/markets"
        raise FetchError(msg)

    records = [_normalize_market_record(raw) for raw in payload if isinstance(raw, dict)]
    return filter_valid_records(records)


def search_coins(
    query: str,
    *,
    settings: Settings | None = None,
) -> list[dict[str, Any]]:
    """Search CoinGecko for coins matching a free-text query.

    Args:
        query: Name or symbol fragment (e.g., "bit", "eth").
        settings: Configuration override. Defaults to ``get_settings()``.

    Returns:
        List of dicts with keys: id, name, symbol, image, market_cap_rank,
        capped at ``settings.search_limit``. Empty list (and no request)
        for an empty or whitespace-only query.

    Raises:
        FetchError: If the request fails or the response is not an
            object with a ``coins`` list.

    """
    if not query or not query.strip():
        return []

    cfg = settings or get_settings()
    payload = _get_json("search", {"query": query.strip()}, cfg)

    coins = payload.get("coins", []) if isinstance(payload, dict) else None
    if not isinstance(coins, list):
        msg = "Unexpected response shape from search"
        raise FetchError(msg)

    entries = [
        coin for coin in coins if isinstance(coin, dict) and isinstance(coin.get("id"), str)
    ]
    results: list[dict[str, Any]] = []
    for coin in entries[: cfg.search_limit]:
        results.append(
            {
                "id": coin.get("id"),
                "name": coin.get("name"),
                "symbol": coin.get("symbol"),
                "image": coin.get("large") or coin.get("thumb"),
                "market_cap_rank": coin.get("market_cap_rank"),
            }
        )
    return results
