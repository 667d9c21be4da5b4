"""Shared test helpers."""

import asyncio
from typing import Dict, List, Optional

import pytest

from funding_arb.exceptions import SourceUnavailable
from funding_arb.exchanges.base import BaseExchange
from funding_arb.models import RateQuote


def make_quote(
    exchange: str,
    asset: str,
    rate: float,
    oi: float = 0.0,
    symbol: Optional[str] = None,
) -> RateQuote:
    return RateQuote(
        asset=asset,
        exchange_symbol=symbol or asset,
        rate_per_interval=rate,
        open_interest_usd=oi,
        exchange=exchange,
    )


def make_table(rates: Dict[str, Dict[str, float]]) -> Dict[str, Dict[str, RateQuote]]:
    """Build a unified table from {exchange: {asset: rate}}."""
    return {
        exchange: {asset: make_quote(exchange, asset, rate) for asset, rate in assets.items()}
        for exchange, assets in rates.items()
    }


class FakeSource(BaseExchange):
    """In-memory source with optional delay and failure."""

    def __init__(
        self,
        name: str,
        quotes: Optional[List[RateQuote]] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.name = name
        self.display_name = name.title()
        self.quotes = list(quotes or [])
        self.delay = delay
        self.error = error
        self.calls = 0
        self.closed = False

    async def fetch_rates(self) -> List[RateQuote]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.quotes)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def unavailable():
    return SourceUnavailable("fake", "connection refused")
