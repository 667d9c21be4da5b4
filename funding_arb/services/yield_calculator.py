"""Yield projection for a capital amount on a funding spread."""

import math
from typing import Any

from funding_arb.models import Opportunity, YieldProjection

DAYS_PER_YEAR = 365
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12

# Two legs, each opened and closed once
FILLS_PER_ROUND_TRIP = 4


def _finite(value: Any) -> float:
    """Coerce to a finite float; anything else counts as 0."""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    return num if math.isfinite(num) else 0.0


def project(
    capital_amount: float,
    spread_percent: float,
    round_trip_fee_percent: float,
) -> YieldProjection:
    """
    Project gross and net earnings of holding a spread for a year.

    Args:
        capital_amount: Capital deployed, in USD
        spread_percent: Annualized spread in percent (20 = 20%)
        round_trip_fee_percent: Fee per fill in percent (0.04 = 0.04%)

    Returns:
        YieldProjection. Non-finite inputs are treated as 0.
    """
    capital = _finite(capital_amount)
    spread = _finite(spread_percent)
    fee = _finite(round_trip_fee_percent)

    annual = capital * (spread / 100)
    total_fees = capital * (fee / 100) * FILLS_PER_ROUND_TRIP

    return YieldProjection(
        daily_earn=annual / DAYS_PER_YEAR,
        weekly_earn=annual / WEEKS_PER_YEAR,
        monthly_earn=annual / MONTHS_PER_YEAR,
        annual_earn=annual,
        total_fees=total_fees,
        net_annual=annual - total_fees,
    )


def project_opportunity(
    opportunity: Opportunity,
    capital_amount: float,
    round_trip_fee_percent: float,
) -> YieldProjection:
    """Project earnings for one opportunity's spread."""
    return project(capital_amount, opportunity.spread_percent, round_trip_fee_percent)


def estimate_annual_on(opportunity: Opportunity, capital_amount: float = 10_000) -> float:
    """Gross yearly earnings on `capital_amount`, ignoring fees."""
    return project(capital_amount, opportunity.spread_percent, 0).annual_earn
