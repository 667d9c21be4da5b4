"""Static metadata about the exchanges quotes can belong to."""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class ExchangeInfo:
    """Display metadata for one exchange."""
    name: str
    display_name: str
    venue_type: str  # DEX or CEX
    fee_note: str  # Indicative taker fee
    zero_fee: bool = False


EXCHANGES: Dict[str, ExchangeInfo] = {
    "orderly": ExchangeInfo("orderly", "Orderly", "DEX", "~0.04%"),
    "hyperliquid": ExchangeInfo("hyperliquid", "Hyperliquid", "DEX", "~0.04%"),
    "lighter": ExchangeInfo("lighter", "Lighter", "DEX", "0%", zero_fee=True),
    "extended": ExchangeInfo("extended", "Extended", "DEX", "~0.02%"),
    "binance": ExchangeInfo("binance", "Binance", "CEX", "~0.02%"),
    "bybit": ExchangeInfo("bybit", "Bybit", "CEX", "~0.04%"),
}


def get_exchange_info(name: str) -> Optional[ExchangeInfo]:
    """Get metadata for an exchange id."""
    return EXCHANGES.get(name.lower())


def is_zero_fee(name: str) -> bool:
    """True if the exchange charges no trading fees."""
    info = get_exchange_info(name)
    return info.zero_fee if info else False


def display_name(name: str) -> str:
    """Human readable exchange name, falling back to the id."""
    info = get_exchange_info(name)
    return info.display_name if info else name
