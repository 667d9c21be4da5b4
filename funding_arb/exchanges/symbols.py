"""
Symbol normalization.

Maps venue instrument ids to a canonical base-asset ticker so the same
market can be matched across exchanges:

    PERP_BTC_USDC -> BTC      (Orderly)
    BTC-USD       -> BTC      (Extended market name)
    BTC/USDT:USDT -> BTC
    SOL-PERP      -> SOL
    ETHUSDT       -> ETH
    sol           -> SOL

Normalizing an already normalized ticker returns it unchanged.
"""

import re
from typing import Callable, Dict, List, Optional

SEPARATORS = re.compile(r"[/\-_:\s]+")

PERP_TAG = "PERP"

# Checked in order, longest first so USDT is not read as USD + T
QUOTE_SUFFIXES = ("USDT", "USDC", "USD")


def _strip_suffixes(base: str) -> str:
    """Strip quote currency and PERP suffixes until none is left."""
    changed = True
    while changed:
        changed = False
        for suffix in QUOTE_SUFFIXES + (PERP_TAG,):
            if base.endswith(suffix) and len(base) > len(suffix):
                base = base[: -len(suffix)]
                changed = True
                break
    return base


def _generic_base(parts: List[str]) -> str:
    """
    Base part of a separated symbol.

    The perpetual tag is only recognized at the ends: a leading tag in the
    PERP_<BASE>_<QUOTE> form, a trailing one in BTC-PERP. A PERP part
    anywhere else is the ticker itself.
    """
    if len(parts) >= 3 and parts[0] == PERP_TAG:
        parts = parts[1:]
    if len(parts) >= 2 and parts[-1] == PERP_TAG:
        parts = parts[:-1]
    return parts[0]


def _orderly_base(parts: List[str]) -> str:
    # Orderly ids are always PERP_<BASE>_<QUOTE>
    if len(parts) >= 2 and parts[0] == PERP_TAG:
        return parts[1]
    return _generic_base(parts)


def _extended_base(parts: List[str]) -> str:
    # Extended markets are <BASE>-<QUOTE> and carry no perpetual tag
    return parts[0]


SOURCE_RULES: Dict[str, Callable[[List[str]], str]] = {
    "orderly": _orderly_base,
    "extended": _extended_base,
}


def normalize_symbol(symbol: str, source: Optional[str] = None) -> str:
    """
    Normalize a venue symbol to its canonical base ticker.

    Args:
        symbol: Venue instrument id in any supported format
        source: Source id selecting venue-specific rules (generic if unknown)

    Returns:
        Uppercase base ticker, or "" for empty input
    """
    if not symbol:
        return ""

    parts = [p for p in SEPARATORS.split(str(symbol).strip().upper()) if p]
    if not parts:
        return ""

    pick_base = SOURCE_RULES.get((source or "").lower(), _generic_base)
    return _strip_suffixes(pick_base(parts))
