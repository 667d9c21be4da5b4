"""Data models for funding rate arbitrage."""

from .funding_rate import (
    RateQuote,
    SourceRates,
    UnifiedTable,
    ExchangeLeg,
    Opportunity,
    YieldProjection,
    OpportunitySnapshot,
    annualize_rate,
)

__all__ = [
    "RateQuote",
    "SourceRates",
    "UnifiedTable",
    "ExchangeLeg",
    "Opportunity",
    "YieldProjection",
    "OpportunitySnapshot",
    "annualize_rate",
]
