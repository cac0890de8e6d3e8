"""Portfolio domain: holdings, reconciliation, valuation, formatting."""
