"""Tests for sorting opportunities."""

import pytest

from funding_arb.models import ExchangeLeg, Opportunity
from funding_arb.services.ranking import SortDirection, SortKey, sort_opportunities


def make_opportunity(asset, spread, oi=0.0, rates=None):
    rates = rates or {"orderly": spread, "lighter": 0.0}
    legs = tuple(sorted(
        (ExchangeLeg(exchange=name, annualized_rate_percent=rate) for name, rate in rates.items()),
        key=lambda leg: leg.annualized_rate_percent,
        reverse=True,
    ))
    return Opportunity(
        asset=asset,
        legs=legs,
        short_leg=legs[0],
        long_leg=legs[-1],
        spread_percent=spread,
        min_open_interest_usd=oi,
    )


@pytest.fixture
def opportunities():
    return [
        make_opportunity("BTC", 5.0, oi=3_000_000),
        make_opportunity("ETH", 12.0, oi=1_000_000),
        make_opportunity("SOL", 5.0, oi=0.0),
        make_opportunity("DOGE", 8.0, oi=2_000_000, rates={"binance": 8.0, "bybit": 0.0}),
    ]


def assets(opps):
    return [o.asset for o in opps]


class TestSortOpportunities:

    def test_spread_desc_is_default(self, opportunities):
        assert assets(sort_opportunities(opportunities)) == ["ETH", "DOGE", "BTC", "SOL"]

    def test_spread_asc_keeps_input_order_on_ties(self, opportunities):
        result = sort_opportunities(opportunities, SortKey.SPREAD, SortDirection.ASC)
        assert assets(result) == ["BTC", "SOL", "DOGE", "ETH"]

    def test_open_interest(self, opportunities):
        result = sort_opportunities(opportunities, "oi", "desc")
        assert assets(result) == ["BTC", "DOGE", "ETH", "SOL"]

    def test_aliases(self, opportunities):
        assert sort_opportunities(opportunities, "apy") == sort_opportunities(opportunities, "spread")
        assert (
            sort_opportunities(opportunities, "open_interest")
            == sort_opportunities(opportunities, SortKey.OPEN_INTEREST)
        )

    def test_exchange_key_missing_leg_counts_as_zero(self, opportunities):
        result = sort_opportunities(opportunities, "orderly", "desc")
        # DOGE has no Orderly leg and sorts as 0
        assert assets(result) == ["ETH", "BTC", "SOL", "DOGE"]

        result = sort_opportunities(opportunities, "binance", "desc")
        assert assets(result)[0] == "DOGE"

    def test_does_not_mutate_input(self, opportunities):
        before = list(opportunities)
        sort_opportunities(opportunities, "spread", "asc")
        assert opportunities == before

    def test_idempotent(self, opportunities):
        for key in ("spread", "oi", "orderly", "bybit"):
            for direction in ("asc", "desc"):
                once = sort_opportunities(opportunities, key, direction)
                assert sort_opportunities(once, key, direction) == once

    def test_reverse_direction_for_strict_keys(self, opportunities):
        strict = [o for o in opportunities if o.asset != "SOL"]
        desc = sort_opportunities(strict, "spread", "desc")
        asc = sort_opportunities(strict, "spread", "asc")
        assert asc == list(reversed(desc))

    def test_unknown_key(self, opportunities):
        with pytest.raises(ValueError):
            sort_opportunities(opportunities, "volume")

    def test_unknown_direction(self, opportunities):
        with pytest.raises(ValueError):
            sort_opportunities(opportunities, "spread", "sideways")

    def test_empty(self):
        assert sort_opportunities([], "spread") == []
