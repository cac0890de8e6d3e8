"""Coinfolio persistence layer.

Keeps the portfolio in a single named slot of a DuckDB key/value table,
serialized as an ordered JSON array of holdings.
"""
