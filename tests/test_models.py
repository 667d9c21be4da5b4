"""Tests for data models."""

import dataclasses

import pytest

from funding_arb.models import ExchangeLeg, Opportunity, OpportunitySnapshot, SourceRates

from conftest import make_quote


def make_opportunity(asset, spread):
    short = ExchangeLeg(exchange="orderly", annualized_rate_percent=spread, zero_fee=False)
    long = ExchangeLeg(exchange="lighter", annualized_rate_percent=0.0, zero_fee=True)
    return Opportunity(asset=asset, legs=(short, long), short_leg=short, long_leg=long,
                       spread_percent=spread)


class TestRateQuote:

    def test_annualized_rate(self):
        assert make_quote("orderly", "BTC", 0.0003).annualized_rate() == pytest.approx(32.85)

    def test_is_immutable(self):
        quote = make_quote("orderly", "BTC", 0.0003)
        with pytest.raises(dataclasses.FrozenInstanceError):
            quote.rate_per_interval = 0.0


class TestOpportunity:

    def test_get_leg(self):
        opp = make_opportunity("BTC", 10)
        assert opp.get_leg("lighter").zero_fee
        assert opp.get_leg("binance") is None

    def test_has_zero_fee_leg(self):
        assert make_opportunity("BTC", 10).has_zero_fee_leg


class TestSourceRates:

    def test_success_and_count(self):
        result = SourceRates(source="lighter", quotes=[
            make_quote("lighter", "BTC", 0.0001),
            make_quote("binance", "BTC", 0.0001),
            make_quote("lighter", "ETH", 0.0001),
        ])
        assert result.success
        assert result.count == 3

    def test_failed(self):
        assert not SourceRates(source="orderly", error="HTTP 500").success


class TestOpportunitySnapshot:

    def test_best_first_wins_on_ties(self):
        snapshot = OpportunitySnapshot(opportunities=[
            make_opportunity("BTC", 5), make_opportunity("ETH", 9), make_opportunity("SOL", 9),
        ])
        assert snapshot.matched_count == 3
        assert snapshot.best.asset == "ETH"

    def test_empty(self):
        assert OpportunitySnapshot().best is None
