"""Ranking of opportunities by spread, open interest, or one exchange's rate."""

from enum import Enum
from typing import Callable, List, Sequence, Union

from funding_arb.exchanges.metadata import EXCHANGES
from funding_arb.models import Opportunity


class SortKey(Enum):
    """Aggregate sort keys. Any exchange id is accepted as well."""
    SPREAD = "spread"
    OPEN_INTEREST = "open_interest"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


_KEY_ALIASES = {
    "spread": SortKey.SPREAD,
    "apy": SortKey.SPREAD,
    "open_interest": SortKey.OPEN_INTEREST,
    "oi": SortKey.OPEN_INTEREST,
}


def _key_function(
    key: Union[SortKey, str],
    opportunities: Sequence[Opportunity],
) -> Callable[[Opportunity], float]:
    if isinstance(key, str):
        name = key.strip().lower()
        if name in _KEY_ALIASES:
            key = _KEY_ALIASES[name]
        else:
            known = set(EXCHANGES)
            for opp in opportunities:
                known.update(opp.rate_by_exchange)
            if name not in known:
                raise ValueError(f"Unknown sort key: {key!r}")

            # Missing leg sorts as a 0% rate
            return lambda opp: opp.rate_by_exchange.get(name, 0.0)

    if key is SortKey.SPREAD:
        return lambda opp: opp.spread_percent
    if key is SortKey.OPEN_INTEREST:
        return lambda opp: opp.min_open_interest_usd
    raise ValueError(f"Unknown sort key: {key!r}")


def sort_opportunities(
    opportunities: Sequence[Opportunity],
    key: Union[SortKey, str] = SortKey.SPREAD,
    direction: Union[SortDirection, str] = SortDirection.DESC,
) -> List[Opportunity]:
    """
    Sort opportunities without modifying the input.

    The sort is stable in both directions: opportunities with equal keys
    keep their input order.

    Args:
        opportunities: Opportunities to sort
        key: SortKey, an alias ("apy", "oi"), or an exchange id
        direction: SortDirection or "asc" / "desc"

    Returns:
        New sorted list

    Raises:
        ValueError: for an unknown key or direction
    """
    direction = SortDirection(direction.lower() if isinstance(direction, str) else direction)
    key_func = _key_function(key, opportunities)
    return sorted(opportunities, key=key_func, reverse=direction is SortDirection.DESC)
