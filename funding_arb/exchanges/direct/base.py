"""Base class for direct API funding rate sources."""

import asyncio
import math
from abc import abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp

from funding_arb.exceptions import MalformedResponse, SourceUnavailable
from funding_arb.exchanges.base import BaseExchange
from funding_arb.exchanges.symbols import normalize_symbol
from funding_arb.models import RateQuote
from funding_arb.utils import get_logger


def to_number(value: Any) -> float:
    """Coerce an API value to a finite float, 0.0 if that is not possible."""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    return num if math.isfinite(num) else 0.0


def first_present(data: Dict[str, Any], *keys: str) -> Any:
    """Return the value of the first key that is present and not None."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


class DirectAPIExchange(BaseExchange):
    """
    Base class for direct API funding rate sources.

    Subclasses implement `_fetch_rates`. Any error that is not already a
    SourceUnavailable is wrapped as MalformedResponse, so parsing faults
    never leave the source.
    """

    name: str = "direct"
    display_name: str = "Direct API Exchange"
    base_url: str = ""

    def __init__(self, base_url: Optional[str] = None):
        self._logger = get_logger()
        self._session: Optional[aiohttp.ClientSession] = None
        if base_url:
            self.base_url = base_url

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=30, connect=10)
            connector = aiohttp.TCPConnector(limit=10, force_close=True)
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
                timeout=timeout,
                connector=connector,
            )
        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        retries: int = 3,
    ) -> Any:
        """
        Make HTTP request to API with retry on rate limiting.

        Raises:
            SourceUnavailable: network failure or non-200 status
            MalformedResponse: body is not JSON
        """
        session = await self._get_session()

        for attempt in range(retries):
            try:
                async with session.request(method, url, params=params, json=json) as resp:
                    if resp.status == 200:
                        try:
                            return await resp.json(content_type=None)
                        except ValueError as e:
                            raise MalformedResponse(self.name, f"invalid JSON from {url}: {e}")
                    elif resp.status == 429 and attempt < retries - 1:  # Rate limit
                        await asyncio.sleep(1 * (attempt + 1))
                        continue
                    else:
                        raise SourceUnavailable(self.name, f"HTTP {resp.status} for {url}")
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt < retries - 1:
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise SourceUnavailable(self.name, f"request failed - {e!r}")

        raise SourceUnavailable(self.name, f"no response from {url}")

    async def _request_optional(self, method: str, url: str, **kwargs) -> Any:
        """Request a secondary endpoint; None if it is unavailable."""
        try:
            return await self._request(method, url, **kwargs)
        except SourceUnavailable as e:
            self._logger.debug(f"{self.display_name}: secondary endpoint unavailable - {e}")
            return None

    def _normalize_symbol(self, symbol: str) -> str:
        """Map a venue symbol to the canonical asset ticker."""
        return normalize_symbol(symbol, self.name)

    async def fetch_rates(self) -> List[RateQuote]:
        """Fetch all funding rates from the source."""
        try:
            quotes = await self._fetch_rates()
        except SourceUnavailable:
            raise
        except asyncio.TimeoutError:
            raise SourceUnavailable(self.name, "request timed out")
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponse(self.name, f"unexpected payload - {e!r}")
        finally:
            await self.close()

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched {len(quotes)} funding rates"
        )
        return quotes

    @abstractmethod
    async def _fetch_rates(self) -> List[RateQuote]:
        """Fetch and parse rates. Implemented by each source."""
        pass
