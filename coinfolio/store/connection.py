"""DuckDB connection management for Coinfolio.

Handles database initialization, schema creation, and connection
lifecycle. The portfolio database defaults to
``~/.coinfolio/data/portfolio.duckdb`` (see ``coinfolio.config``).

"""

from __future__ import annotations

import logging
from pathlib import Path

import duckdb

from coinfolio.config import DEFAULT_DATA_DIR
from coinfolio.store.schema import ALL_TABLES

logger = logging.getLogger(__name__)


def get_connection(
    db_path: str | Path | None = None,
) -> duckdb.DuckDBPyConnection:
    """Open a DuckDB connection, creating the parent directory if needed.

    Args:
        db_path: Path to the .duckdb file. If None, uses in-memory database.

    Returns:
        Active DuckDB connection.

    """
    if db_path is None:
        return duckdb.connect(":memory:")

    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path))


def init_portfolio_db(
    db_path: str | Path | None = None,
) -> duckdb.DuckDBPyConnection:
    """Initialize the portfolio database with schema.

    Args:
        db_path: Path to the portfolio.duckdb file.
            Defaults to ~/.coinfolio/data/portfolio.duckdb.

    Returns:
        Initialized DuckDB connection.

    """
    if db_path is None:
        db_path = DEFAULT_DATA_DIR / "portfolio.duckdb"

    conn = get_connection(db_path)
    for ddl in ALL_TABLES:
        conn.execute(ddl)
    logger.info("Portfolio database initialized at %s", db_path)
    return conn


def init_memory_db() -> duckdb.DuckDBPyConnection:
    """Create an in-memory database with full schema.

    Useful for testing and ephemeral sessions.
    """
    conn = get_connection(None)
    for ddl in ALL_TABLES:
        conn.execute(ddl)
    return conn
