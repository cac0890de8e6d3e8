"""DuckDB schema definitions for Coinfolio.

Contains DDL for the application state table:
- app_state: named slots holding serialized state (the portfolio lives
  in the ``cryptoPortfolio`` slot by default)

"""

from __future__ import annotations

# ── Application state ──

CREATE_APP_STATE = """
CREATE TABLE IF NOT EXISTS app_state (
    slot         VARCHAR PRIMARY KEY,
    payload      VARCHAR NOT NULL,
    updated_at   TIMESTAMP DEFAULT current_timestamp
);
"""

ALL_TABLES: list[str] = [
    CREATE_APP_STATE,
]
