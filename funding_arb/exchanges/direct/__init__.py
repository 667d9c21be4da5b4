"""Direct API funding rate sources."""

from .base import DirectAPIExchange
from .orderly import OrderlyDirectExchange
from .lighter import LighterDirectExchange
from .extended import ExtendedDirectExchange
from .hyperliquid import HyperliquidDirectExchange

__all__ = [
    "DirectAPIExchange",
    "OrderlyDirectExchange",
    "LighterDirectExchange",
    "ExtendedDirectExchange",
    "HyperliquidDirectExchange",
]
