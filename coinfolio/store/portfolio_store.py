"""Portfolio state store — DuckDB slot for the serialized portfolio.

The whole portfolio is written to one named slot as a JSON array of
holdings, in insertion order. Serialization is deterministic, so saving
the same portfolio twice stores byte-identical payloads.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from coinfolio.config import DEFAULT_STORAGE_SLOT
from coinfolio.errors import DeserializationError
from coinfolio.portfolio.holding import Holding

if TYPE_CHECKING:
    import duckdb

logger = logging.getLogger(__name__)


def serialize_portfolio(portfolio: tuple[Holding, ...]) -> str:
    """Encode a portfolio as compact JSON with a fixed key order."""
    return json.dumps(
        [h.to_dict() for h in portfolio],
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def deserialize_portfolio(payload: str) -> tuple[Holding, ...]:
    """Decode a stored payload back into a portfolio.

    Duplicate ids keep their first occurrence.

    Raises:
        DeserializationError: If the payload is not a JSON array of
            valid holding objects.

    """
    try:
        raw: Any = json.loads(payload)
    except ValueError as exc:
        msg = f"Stored portfolio is not valid JSON: {exc}"
        raise DeserializationError(msg) from exc

    if not isinstance(raw, list):
        msg = f"Stored portfolio must be a JSON array, got {type(raw).__name__}"
        raise DeserializationError(msg)

    holdings: dict[str, Holding] = {}
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            msg = f"Entry {index} is not an object"
            raise DeserializationError(msg)
        try:
            holding = Holding.from_dict(entry)
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Entry {index} is not a valid holding: {exc}"
            raise DeserializationError(msg) from exc
        holdings.setdefault(holding.id, holding)

    return tuple(holdings.values())


def read_payload(
    conn: duckdb.DuckDBPyConnection,
    slot: str = DEFAULT_STORAGE_SLOT,
) -> str | None:
    """Return the raw stored payload for a slot, or None if absent."""
    row = conn.execute("SELECT payload FROM app_state WHERE slot = ?", [slot]).fetchone()
    return None if row is None else row[0]


def load_portfolio(
    conn: duckdb.DuckDBPyConnection,
    slot: str = DEFAULT_STORAGE_SLOT,
) -> tuple[Holding, ...]:
    """Load the saved portfolio.

    Args:
        conn: Active DuckDB connection.
        slot: Storage slot name.

    Returns:
        The saved holdings in insertion order. Empty if nothing is
        stored or the stored payload is malformed.

    """
    payload = read_payload(conn, slot)
    if payload is None:
        return ()

    try:
        portfolio = deserialize_portfolio(payload)
    except DeserializationError as exc:
        logger.warning("Discarding malformed portfolio in slot %s: %s", slot, exc)
        return ()

    logger.info("Loaded %d holdings from slot %s", len(portfolio), slot)
    return portfolio


def save_portfolio(
    conn: duckdb.DuckDBPyConnection,
    portfolio: tuple[Holding, ...],
    slot: str = DEFAULT_STORAGE_SLOT,
) -> str:
    """Overwrite the slot with the serialized portfolio.

    Empty portfolios are saved too (as ``[]``) so removing the last
    holding clears previously stored state.

    Args:
        conn: Active DuckDB connection.
        portfolio: Holdings to store.
        slot: Storage slot name.

    Returns:
        The payload that was written.

    """
    payload = serialize_portfolio(portfolio)
    conn.execute(
        """
        INSERT OR REPLACE INTO app_state (slot, payload, updated_at)
        VALUES (?, ?, current_timestamp)
        """,
        [slot, payload],
    )
    logger.debug("Saved %d holdings to slot %s", len(portfolio), slot)
    return payload


def clear_portfolio(
    conn: duckdb.DuckDBPyConnection,
    slot: str = DEFAULT_STORAGE_SLOT,
) -> None:
    """Delete the slot entirely."""
    conn.execute("DELETE FROM app_state WHERE slot = ?", [slot])
    logger.info("Cleared slot %s", slot)
