"""
Refresh Service.

Periodically fetches every configured source, rebuilds the unified table
and recomputes opportunities. Manual and timer refreshes share one
in-flight cycle, and a failed cycle keeps the last good snapshot.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Union

from funding_arb.config import get_config
from funding_arb.exceptions import RefreshFailed
from funding_arb.exchanges.registry import ExchangeRegistry
from funding_arb.models import Opportunity, OpportunitySnapshot
from funding_arb.services.aggregator import build_unified_table
from funding_arb.services.arbitrage_analyzer import AnalyzerConfig, ArbitrageAnalyzer
from funding_arb.services.ranking import SortDirection, SortKey, sort_opportunities

logger = logging.getLogger(__name__)


class RefreshService:
    """
    Owns the refresh cycle and the latest opportunity snapshot.

    Features:
    - Single-flight: concurrent refresh() calls join the cycle in flight
    - Background refresh every `refresh_interval` seconds
    - Per-source timeouts; optional sources degrade to no quotes
    - On failure the previous snapshot stays available
    """

    def __init__(
        self,
        registry: ExchangeRegistry,
        analyzer: Optional[ArbitrageAnalyzer] = None,
        refresh_interval: Optional[float] = None,
        fetch_timeout: Optional[float] = None,
    ):
        """
        Initialize the service.

        Args:
            registry: Configured sources
            analyzer: Opportunity builder (settings from config by default)
            refresh_interval: Background refresh period in seconds
            fetch_timeout: Timeout per source in seconds
        """
        config = get_config()

        self._registry = registry
        self._analyzer = analyzer or ArbitrageAnalyzer(AnalyzerConfig.from_config())
        self._refresh_interval = refresh_interval or config.funding.refresh_interval
        self._fetch_timeout = fetch_timeout or config.funding.fetch_timeout

        self._snapshot: Optional[OpportunitySnapshot] = None
        self._last_error: Optional[RefreshFailed] = None
        self._inflight: Optional[asyncio.Task] = None
        self._background_task: Optional[asyncio.Task] = None
        self._running = False

        # Statistics
        self._cycle_count = 0
        self._failure_count = 0
        self._coalesced_count = 0

    @property
    def snapshot(self) -> Optional[OpportunitySnapshot]:
        """Last successfully computed snapshot."""
        return self._snapshot

    @property
    def last_error(self) -> Optional[RefreshFailed]:
        """Error of the most recent cycle, None if it succeeded."""
        return self._last_error

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def start(self) -> None:
        """Run an initial refresh and start the background loop."""
        if self._running:
            return

        self._running = True
        logger.info(f"Refresh: Starting, interval={self._refresh_interval}s")

        try:
            await self.refresh()
        except RefreshFailed:
            # Already logged; the loop will retry
            pass

        self._background_task = asyncio.create_task(self._background_loop())

    async def stop(self) -> None:
        """Stop the background loop and close source sessions."""
        self._running = False

        if self._background_task:
            self._background_task.cancel()
            try:
                await self._background_task
            except asyncio.CancelledError:
                pass
            self._background_task = None

        await self._registry.close_all()
        logger.info("Refresh: Stopped")

    async def refresh(self) -> OpportunitySnapshot:
        """
        Refresh now, or join the refresh already in flight.

        Returns:
            The new snapshot

        Raises:
            RefreshFailed: a required source failed; `snapshot` still holds
                the previous result
        """
        if self.is_refreshing:
            self._coalesced_count += 1
            logger.debug("Refresh: Joining refresh already in flight")
        else:
            self._inflight = asyncio.create_task(self._run_cycle())

        # Shielded so a cancelled caller does not cancel the shared cycle
        return await asyncio.shield(self._inflight)

    def get_opportunities(
        self,
        key: Union[SortKey, str] = SortKey.SPREAD,
        direction: Union[SortDirection, str] = SortDirection.DESC,
        limit: Optional[int] = None,
    ) -> List[Opportunity]:
        """Opportunities of the current snapshot, sorted."""
        if self._snapshot is None:
            return []
        ranked = sort_opportunities(self._snapshot.opportunities, key, direction)
        return ranked[:limit] if limit else ranked

    def get_info(self) -> dict:
        """Get refresh statistics and info."""
        snapshot = self._snapshot
        return {
            "has_data": snapshot is not None,
            "refreshed_at": snapshot.refreshed_at if snapshot else None,
            "matched_count": snapshot.matched_count if snapshot else 0,
            "last_error": str(self._last_error) if self._last_error else None,
            "cycle_count": self._cycle_count,
            "failure_count": self._failure_count,
            "coalesced_count": self._coalesced_count,
            "refresh_interval": self._refresh_interval,
            "is_running": self._running,
            "sources": self._registry.names,
            "stats": (
                self._analyzer.get_stats(snapshot.source_results, snapshot.table)
                if snapshot else None
            ),
        }

    async def _run_cycle(self) -> OpportunitySnapshot:
        """Fetch all sources and rebuild the snapshot."""
        self._cycle_count += 1
        results = await self._registry.fetch_all(timeout=self._fetch_timeout)

        failed_required = {
            r.source: r.error for r in results if r.required and not r.success
        }
        if failed_required:
            self._failure_count += 1
            self._last_error = RefreshFailed(failed_required)
            logger.error(f"Refresh: {self._last_error} - keeping previous results")
            raise self._last_error

        table = build_unified_table(results)
        opportunities = self._analyzer.analyze(table)

        self._snapshot = OpportunitySnapshot(
            opportunities=opportunities,
            table=table,
            source_results=results,
            refreshed_at=datetime.utcnow(),
        )
        self._last_error = None

        logger.info(
            f"Refresh: {len(opportunities)} opportunities across "
            f"{len(table)} exchanges"
        )
        return self._snapshot

    async def _background_loop(self) -> None:
        """Background loop for periodic refreshing."""
        while self._running:
            try:
                await asyncio.sleep(self._refresh_interval)

                if not self._running:
                    break

                await self.refresh()

            except asyncio.CancelledError:
                break
            except RefreshFailed:
                continue
            except Exception as e:
                logger.exception(f"Refresh: Background refresh error: {e}")
