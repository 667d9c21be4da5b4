"""Cross-exchange funding rate arbitrage scanner."""

__version__ = "0.1.0"
