"""
Aggregator

Merges the quotes of every source into one table keyed by exchange, then
by canonical asset.
"""

import logging
from typing import Dict, Iterable

from funding_arb.models import RateQuote, SourceRates, UnifiedTable

logger = logging.getLogger(__name__)


def build_unified_table(source_results: Iterable[SourceRates]) -> UnifiedTable:
    """
    Build the unified table for one refresh cycle.

    Failed sources contribute nothing. When two venue symbols of the same
    exchange normalize to the same asset, the quote emitted later wins and
    the collision is logged.

    Args:
        source_results: Source results in registry order

    Returns:
        Mapping exchange -> asset -> quote
    """
    table: Dict[str, Dict[str, RateQuote]] = {}

    for result in source_results:
        if not result.success:
            continue

        for quote in result.quotes:
            if not quote.asset:
                continue

            exchange_table = table.setdefault(quote.exchange, {})
            previous = exchange_table.get(quote.asset)
            if previous is not None:
                logger.warning(
                    f"{quote.exchange}: {previous.exchange_symbol} and {quote.exchange_symbol} "
                    f"both normalize to {quote.asset}, keeping {quote.exchange_symbol}"
                )
            exchange_table[quote.asset] = quote

    return table
