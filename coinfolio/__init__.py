"""Coinfolio — local cryptocurrency portfolio tracker.

Holdings are resolved against the CoinGecko public API, quantities are
kept locally in DuckDB, and prices are refreshed on demand.
"""

__version__ = "0.1.0"
