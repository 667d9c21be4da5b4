"""
Arbitrage Analyzer Service

Builds funding rate arbitrage opportunities from the unified table.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from funding_arb.config import DEFAULT_EXCHANGE_PRIORITY, get_config
from funding_arb.exchanges.metadata import is_zero_fee
from funding_arb.models import (
    ExchangeLeg,
    Opportunity,
    RateQuote,
    SourceRates,
    UnifiedTable,
    annualize_rate,
)
from funding_arb.models.funding_rate import DEFAULT_INTERVAL_HOURS

logger = logging.getLogger(__name__)

DEFAULT_MIN_SPREAD = 0.5

# Orderly instrument id is used as the trade hint for every asset
TRADE_SYMBOL_EXCHANGE = "orderly"


def _exchange_order(exchanges: Iterable[str], priority: Sequence[str]) -> List[str]:
    """Exchanges in priority order; unlisted ones follow alphabetically."""
    present = set(exchanges)
    ordered = list(dict.fromkeys(name for name in priority if name in present))
    ordered.extend(sorted(present - set(ordered)))
    return ordered


def _min_positive_open_interest(legs: Iterable[ExchangeLeg]) -> float:
    """Smallest open interest reported above zero, or 0 if none is."""
    values = [leg.open_interest_usd for leg in legs if leg.open_interest_usd > 0]
    return min(values) if values else 0.0


def _trade_symbol_hint(asset: str, table: UnifiedTable) -> str:
    quote = table.get(TRADE_SYMBOL_EXCHANGE, {}).get(asset)
    if quote is not None and quote.exchange_symbol:
        return quote.exchange_symbol
    return f"PERP_{asset}_USDC"


def _make_leg(exchange: str, quote: RateQuote, interval_hours: int) -> ExchangeLeg:
    return ExchangeLeg(
        exchange=exchange,
        annualized_rate_percent=annualize_rate(quote.rate_per_interval, interval_hours),
        open_interest_usd=quote.open_interest_usd,
        zero_fee=is_zero_fee(exchange),
        exchange_symbol=quote.exchange_symbol,
    )


def compute_opportunities(
    table: UnifiedTable,
    min_spread_threshold: float = DEFAULT_MIN_SPREAD,
    priority: Sequence[str] = DEFAULT_EXCHANGE_PRIORITY,
    interval_hours: int = DEFAULT_INTERVAL_HOURS,
) -> List[Opportunity]:
    """
    Find one opportunity per asset quoted by at least two exchanges.

    Legs are sorted by annualized rate, highest first; equal rates keep the
    exchange priority order. The short leg is the first one, the long leg
    the last. Assets whose spread is below the threshold are dropped.

    The output only depends on the arguments: assets come out in
    alphabetical order.

    Args:
        table: Unified table (exchange -> asset -> quote)
        min_spread_threshold: Minimum annualized spread in percentage points
        priority: Exchange order used to break ties
        interval_hours: Funding interval every rate is quoted for

    Returns:
        List of opportunities
    """
    exchanges = _exchange_order(table.keys(), priority)

    assets = set()
    for exchange_table in table.values():
        assets.update(exchange_table.keys())

    opportunities = []

    for asset in sorted(assets):
        legs = [
            _make_leg(exchange, table[exchange][asset], interval_hours)
            for exchange in exchanges
            if asset in table[exchange]
        ]

        # Need at least 2 exchanges
        if len(legs) < 2:
            continue

        # sorted() is stable, ties keep priority order
        legs = sorted(legs, key=lambda leg: leg.annualized_rate_percent, reverse=True)
        short_leg, long_leg = legs[0], legs[-1]
        spread = short_leg.annualized_rate_percent - long_leg.annualized_rate_percent

        if spread < min_spread_threshold:
            continue

        opportunities.append(Opportunity(
            asset=asset,
            legs=tuple(legs),
            short_leg=short_leg,
            long_leg=long_leg,
            spread_percent=spread,
            min_open_interest_usd=_min_positive_open_interest(legs),
            trade_symbol_hint=_trade_symbol_hint(asset, table),
        ))

    return opportunities


@dataclass
class AnalyzerConfig:
    """Configuration for arbitrage analysis."""

    # Minimum annualized spread to keep (in percentage points)
    min_spread: float = DEFAULT_MIN_SPREAD

    # Tie-break order between exchanges
    exchange_priority: List[str] = field(default_factory=lambda: list(DEFAULT_EXCHANGE_PRIORITY))

    # Funding interval all sources are assumed to use
    interval_hours: int = DEFAULT_INTERVAL_HOURS

    @classmethod
    def from_config(cls) -> "AnalyzerConfig":
        """Build analyzer settings from the global configuration."""
        config = get_config()
        return cls(
            min_spread=config.arbitrage.min_spread,
            exchange_priority=list(config.arbitrage.exchange_priority),
            interval_hours=config.funding.interval_hours,
        )


class ArbitrageAnalyzer:
    """
    Analyzes funding rates across exchanges to find arbitrage opportunities.

    Strategy:
    - Find assets listed on at least two exchanges
    - Short where annualized funding is highest, long where it is lowest
    - Keep assets whose spread clears the minimum
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()

    def analyze(self, table: UnifiedTable, verbose: bool = False) -> List[Opportunity]:
        """Compute opportunities for a unified table."""
        opportunities = compute_opportunities(
            table,
            min_spread_threshold=self.config.min_spread,
            priority=self.config.exchange_priority,
            interval_hours=self.config.interval_hours,
        )

        if verbose:
            logger.info(
                f"Analyzer: {len(opportunities)} opportunities with spread >= "
                f"{self.config.min_spread}%"
            )

        return opportunities

    def get_stats(self, source_results: List[SourceRates], table: UnifiedTable) -> Dict:
        """Get statistics about the data."""
        asset_counts: Dict[str, int] = {}
        for exchange_table in table.values():
            for asset in exchange_table:
                asset_counts[asset] = asset_counts.get(asset, 0) + 1

        return {
            "total_rates": sum(r.count for r in source_results),
            "sources": sum(1 for r in source_results if r.success),
            "failed_sources": sum(1 for r in source_results if not r.success),
            "exchanges": len(table),
            "unique_assets": len(asset_counts),
            "multi_exchange_assets": sum(1 for n in asset_counts.values() if n >= 2),
        }
