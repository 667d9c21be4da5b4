"""Source registry: which sources are fetched, and whether they must succeed."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Type

from funding_arb.config import Config, get_config
from funding_arb.exceptions import SourceUnavailable
from funding_arb.exchanges.base import BaseExchange
from funding_arb.exchanges.direct import (
    ExtendedDirectExchange,
    HyperliquidDirectExchange,
    LighterDirectExchange,
    OrderlyDirectExchange,
)
from funding_arb.models import SourceRates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceDescriptor:
    """A configured source: its id, whether it is required, and its adapter."""
    id: str
    required: bool
    adapter: BaseExchange


class ExchangeRegistry:
    """
    Registry of configured funding rate sources.

    Built once at startup from a list of descriptors. Adding or removing a
    venue is a configuration change (ENABLED_SOURCES / REQUIRED_SOURCES).
    """

    # All known source classes
    _sources: Dict[str, Type[BaseExchange]] = {
        "orderly": OrderlyDirectExchange,
        "lighter": LighterDirectExchange,
        "extended": ExtendedDirectExchange,
        "hyperliquid": HyperliquidDirectExchange,
    }

    def __init__(self, descriptors: Sequence[SourceDescriptor]):
        ids = [d.id for d in descriptors]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate source ids: {ids}")
        self._descriptors = tuple(descriptors)

    @classmethod
    def get_source_class(cls, name: str) -> Optional[Type[BaseExchange]]:
        """Get source class by name."""
        return cls._sources.get(name.lower())

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get list of all known source names."""
        return list(cls._sources.keys())

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        sources: Optional[Sequence[str]] = None,
    ) -> "ExchangeRegistry":
        """
        Build the registry from configuration.

        Args:
            config: Configuration (global config by default)
            sources: Override for the enabled source names

        Returns:
            Registry with one descriptor per enabled, known source
        """
        config = config or get_config()
        names = [s.lower() for s in (sources or config.sources.enabled_sources)]
        required = set(config.sources.required_sources)

        descriptors = []
        for name in names:
            source_class = cls.get_source_class(name)
            if source_class is None:
                logger.warning(f"Unknown source '{name}', skipping")
                continue
            if any(d.id == name for d in descriptors):
                continue
            descriptors.append(SourceDescriptor(
                id=name,
                required=name in required,
                adapter=source_class(),
            ))

        return cls(descriptors)

    @property
    def descriptors(self) -> List[SourceDescriptor]:
        """Configured sources in fetch order."""
        return list(self._descriptors)

    @property
    def names(self) -> List[str]:
        return [d.id for d in self._descriptors]

    async def close_all(self) -> None:
        """Close all source connections."""
        for descriptor in self._descriptors:
            try:
                await descriptor.adapter.close()
            except Exception as e:
                logger.debug(f"Error closing source {descriptor.id}: {e}")

    async def fetch_all(self, timeout: Optional[float] = None) -> List[SourceRates]:
        """
        Fetch funding rates from all configured sources in parallel.

        Every fetch is bounded by `timeout`. A failure never raises here: it
        is returned as a SourceRates with `error` set and no quotes. The
        caller decides what a failed required source means.

        Args:
            timeout: Timeout in seconds per source (default from config)

        Returns:
            One SourceRates per source, in registry order
        """
        if timeout is None:
            timeout = get_config().funding.fetch_timeout

        if not self._descriptors:
            logger.warning("No sources configured to fetch funding rates from")
            return []

        logger.debug(f"Fetching funding rates from {len(self._descriptors)} sources: {self.names}")

        results = await asyncio.gather(*[
            self._fetch_with_timeout(descriptor, timeout)
            for descriptor in self._descriptors
        ])

        total = sum(r.count for r in results)
        logger.info(f"Fetched total of {total} funding rates from {len(results)} sources")
        return list(results)

    async def _fetch_with_timeout(
        self,
        descriptor: SourceDescriptor,
        timeout: float,
    ) -> SourceRates:
        """Fetch one source with timeout and error handling."""
        name = descriptor.id
        try:
            quotes = await asyncio.wait_for(descriptor.adapter.fetch_rates(), timeout=timeout)
            return SourceRates(source=name, required=descriptor.required, quotes=list(quotes))
        except asyncio.TimeoutError:
            error = str(SourceUnavailable(name, f"timeout after {timeout}s"))
        except SourceUnavailable as e:
            error = str(e)
        except Exception as e:
            error = str(SourceUnavailable(name, f"unexpected error - {e!r}"))

        if descriptor.required:
            logger.error(f"{name}: Required source failed: {error}")
        else:
            logger.warning(f"{name}: Optional source failed, continuing without it: {error}")

        return SourceRates(source=name, required=descriptor.required, error=error)
