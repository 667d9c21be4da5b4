"""Tests for the refresh orchestrator."""

import asyncio

import pytest

from funding_arb.exceptions import RefreshFailed, SourceUnavailable
from funding_arb.exchanges.registry import ExchangeRegistry, SourceDescriptor
from funding_arb.services.arbitrage_analyzer import AnalyzerConfig, ArbitrageAnalyzer
from funding_arb.services.refresh_service import RefreshService

from conftest import FakeSource, make_quote


def make_service(*sources, timeout=0.5, interval=60):
    registry = ExchangeRegistry([
        SourceDescriptor(id=source.name, required=required, adapter=source)
        for source, required in sources
    ])
    return RefreshService(
        registry,
        analyzer=ArbitrageAnalyzer(AnalyzerConfig()),
        refresh_interval=interval,
        fetch_timeout=timeout,
    )


@pytest.fixture
def orderly():
    return FakeSource("orderly", [
        make_quote("orderly", "BTC", 0.0003),
        make_quote("orderly", "ETH", 0.0001),
    ])


@pytest.fixture
def lighter():
    return FakeSource("lighter", [
        make_quote("lighter", "BTC", 0.0001),
        make_quote("binance", "BTC", 0.0002),
        make_quote("binance", "ETH", 0.0004),
    ])


class TestRefresh:

    async def test_builds_snapshot(self, orderly, lighter):
        service = make_service((orderly, True), (lighter, True))

        snapshot = await service.refresh()

        assert service.snapshot is snapshot
        assert [o.asset for o in snapshot.opportunities] == ["BTC", "ETH"]
        btc = snapshot.opportunities[0]
        assert btc.short_leg.exchange == "orderly"
        assert btc.long_leg.exchange == "lighter"
        assert btc.leg_count == 3
        assert snapshot.best.asset == "ETH"
        assert service.last_error is None

    async def test_info_reports_stats(self, orderly, lighter):
        service = make_service((orderly, True), (lighter, True))
        assert service.get_info()["stats"] is None

        await service.refresh()

        assert service.get_info()["stats"] == {
            "total_rates": 5,
            "sources": 2,
            "failed_sources": 0,
            "exchanges": 3,
            "unique_assets": 2,
            "multi_exchange_assets": 2,
        }

    async def test_optional_timeout_drops_its_legs(self, orderly, lighter):
        extended = FakeSource("extended", [
            make_quote("extended", "BTC", -0.0005),
            make_quote("extended", "WIF", 0.001),
            make_quote("extended", "ETH", 0.0),
        ], delay=5)
        service = make_service((orderly, True), (lighter, True), (extended, False), timeout=0.05)

        snapshot = await service.refresh()

        assets = {o.asset: o for o in snapshot.opportunities}
        assert "WIF" not in assets
        assert assets["BTC"].leg_count == 3
        assert assets["BTC"].long_leg.exchange == "lighter"
        assert snapshot.failed_sources.keys() == {"extended"}

    async def test_optional_timeout_below_two_legs(self):
        orderly = FakeSource("orderly", [make_quote("orderly", "SOL", 0.0003)])
        extended = FakeSource("extended", [make_quote("extended", "SOL", 0.0001)], delay=5)
        service = make_service((orderly, True), (extended, False), timeout=0.05)

        snapshot = await service.refresh()

        assert snapshot.opportunities == []

    async def test_required_failure_keeps_previous_snapshot(self, orderly, lighter):
        service = make_service((orderly, True), (lighter, True))
        first = await service.refresh()

        lighter.error = SourceUnavailable("lighter", "HTTP 500")
        with pytest.raises(RefreshFailed) as exc_info:
            await service.refresh()

        assert exc_info.value.failed_sources.keys() == {"lighter"}
        assert service.snapshot is first
        assert service.last_error is exc_info.value

        lighter.error = None
        second = await service.refresh()
        assert second is not first
        assert service.last_error is None

    async def test_required_timeout_aborts(self, orderly):
        slow = FakeSource("lighter", [], delay=5)
        service = make_service((orderly, True), (slow, True), timeout=0.05)

        with pytest.raises(RefreshFailed):
            await service.refresh()

        assert service.snapshot is None

    async def test_concurrent_refreshes_share_one_cycle(self, lighter):
        orderly = FakeSource("orderly", [make_quote("orderly", "BTC", 0.0003)], delay=0.05)
        service = make_service((orderly, True), (lighter, True))

        results = await asyncio.gather(service.refresh(), service.refresh(), service.refresh())

        assert orderly.calls == 1
        assert lighter.calls == 1
        assert results[0] is results[1] is results[2]
        assert service.get_info()["coalesced_count"] == 2

    async def test_sequential_refreshes_fetch_again(self, orderly, lighter):
        service = make_service((orderly, True), (lighter, True))

        await service.refresh()
        await service.refresh()

        assert orderly.calls == 2

    async def test_cancelled_caller_does_not_cancel_cycle(self, lighter):
        orderly = FakeSource("orderly", [make_quote("orderly", "BTC", 0.0003)], delay=0.05)
        service = make_service((orderly, True), (lighter, True))

        waiter = asyncio.ensure_future(service.refresh())
        await asyncio.sleep(0.01)
        waiter.cancel()

        snapshot = await service.refresh()

        assert orderly.calls == 1
        assert snapshot.matched_count == 1

    async def test_get_opportunities_sorted(self, orderly, lighter):
        service = make_service((orderly, True), (lighter, True))
        assert service.get_opportunities() == []

        await service.refresh()

        spreads = [o.spread_percent for o in service.get_opportunities("spread", "asc")]
        assert spreads == sorted(spreads)
        assert len(service.get_opportunities(limit=1)) == 1


class TestBackgroundLoop:

    async def test_start_refreshes_and_stop_closes(self, orderly, lighter):
        service = make_service((orderly, True), (lighter, True), interval=0.05)

        await service.start()
        assert service.snapshot is not None
        await asyncio.sleep(0.12)
        await service.stop()

        assert orderly.calls >= 2
        assert orderly.closed and lighter.closed
        assert not service.get_info()["is_running"]

    async def test_loop_survives_failures(self, orderly, lighter):
        lighter.error = SourceUnavailable("lighter", "HTTP 500")
        service = make_service((orderly, True), (lighter, True), interval=0.02)

        await service.start()
        assert service.snapshot is None

        lighter.error = None
        await asyncio.sleep(0.1)
        await service.stop()

        assert service.snapshot is not None
        assert service.get_info()["failure_count"] >= 1
