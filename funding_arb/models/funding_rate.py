"""Models for funding rate data and arbitrage opportunities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple


HOURS_PER_DAY = 24
DAYS_PER_YEAR = 365
DEFAULT_INTERVAL_HOURS = 8


def annualize_rate(rate_per_interval: float, interval_hours: int = DEFAULT_INTERVAL_HOURS) -> float:
    """Convert a per-interval funding rate (decimal) to an annualized percent."""
    return rate_per_interval * (HOURS_PER_DAY / interval_hours) * DAYS_PER_YEAR * 100


@dataclass(frozen=True)
class RateQuote:
    """One exchange's funding rate for one canonical asset."""

    asset: str  # Canonical base ticker (e.g., BTC)
    exchange_symbol: str  # Venue instrument id (e.g., PERP_BTC_USDC)
    rate_per_interval: float  # Funding rate as decimal per interval (0.0001 = 0.01%)
    open_interest_usd: float = 0.0
    exchange: str = ""

    def annualized_rate(self, interval_hours: int = DEFAULT_INTERVAL_HOURS) -> float:
        """Annualized funding rate in percent."""
        return annualize_rate(self.rate_per_interval, interval_hours)

    def __repr__(self) -> str:
        return (
            f"RateQuote(asset={self.asset}, exchange={self.exchange}, "
            f"rate={self.rate_per_interval * 100:.4f}%, oi=${self.open_interest_usd:,.0f})"
        )


@dataclass
class SourceRates:
    """Result of fetching one source."""

    source: str
    required: bool = False
    quotes: List[RateQuote] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=datetime.utcnow)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Check if data was fetched successfully."""
        return self.error is None

    @property
    def count(self) -> int:
        """Number of quotes fetched."""
        return len(self.quotes)


# exchange id -> canonical asset -> quote
UnifiedTable = Dict[str, Dict[str, RateQuote]]


@dataclass(frozen=True)
class ExchangeLeg:
    """One exchange's participation in an opportunity."""

    exchange: str
    annualized_rate_percent: float
    open_interest_usd: float = 0.0
    zero_fee: bool = False
    exchange_symbol: str = ""


@dataclass(frozen=True)
class Opportunity:
    """
    A funding rate arbitrage opportunity for one asset.

    Strategy: short on the exchange with the highest annualized funding
    (receives funding), long on the one with the lowest (pays least).
    """

    asset: str
    legs: Tuple[ExchangeLeg, ...]  # Descending by annualized rate
    short_leg: ExchangeLeg
    long_leg: ExchangeLeg
    spread_percent: float
    min_open_interest_usd: float = 0.0
    trade_symbol_hint: str = ""

    @property
    def rate_by_exchange(self) -> Dict[str, float]:
        """Annualized rate per exchange quoting this asset."""
        return {leg.exchange: leg.annualized_rate_percent for leg in self.legs}

    @property
    def has_zero_fee_leg(self) -> bool:
        """True if the short or long leg trades without fees."""
        return self.short_leg.zero_fee or self.long_leg.zero_fee

    @property
    def leg_count(self) -> int:
        return len(self.legs)

    def get_leg(self, exchange: str) -> Optional[ExchangeLeg]:
        """Get the leg for an exchange, if it quotes this asset."""
        for leg in self.legs:
            if leg.exchange == exchange:
                return leg
        return None

    def __repr__(self) -> str:
        return (
            f"Opportunity({self.asset}: "
            f"Short {self.short_leg.exchange} {self.short_leg.annualized_rate_percent:+.2f}%, "
            f"Long {self.long_leg.exchange} {self.long_leg.annualized_rate_percent:+.2f}%, "
            f"Spread={self.spread_percent:.2f}%)"
        )


@dataclass(frozen=True)
class YieldProjection:
    """Projected earnings for a capital amount on one spread."""

    daily_earn: float
    weekly_earn: float
    monthly_earn: float
    annual_earn: float
    total_fees: float  # Entry and exit fills on both legs
    net_annual: float


@dataclass
class OpportunitySnapshot:
    """Output of one successful refresh cycle."""

    opportunities: List[Opportunity] = field(default_factory=list)
    table: UnifiedTable = field(default_factory=dict)
    source_results: List[SourceRates] = field(default_factory=list)
    refreshed_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def matched_count(self) -> int:
        """Number of assets with an opportunity."""
        return len(self.opportunities)

    @property
    def best(self) -> Optional[Opportunity]:
        """Opportunity with the highest spread (first one wins on ties)."""
        best = None
        for opp in self.opportunities:
            if best is None or opp.spread_percent > best.spread_percent:
                best = opp
        return best

    @property
    def failed_sources(self) -> Dict[str, str]:
        """Sources that failed during this cycle, with their errors."""
        return {r.source: r.error for r in self.source_results if not r.success}
