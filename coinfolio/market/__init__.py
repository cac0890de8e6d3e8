"""Market data: CoinGecko client and record validation."""
