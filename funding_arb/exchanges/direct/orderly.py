"""Orderly Network direct API connector."""

import asyncio
from typing import Any, Dict, List

from funding_arb.exceptions import MalformedResponse
from funding_arb.models import RateQuote
from .base import DirectAPIExchange, first_present, to_number


def _extract_rows(payload: Any) -> List[Dict[str, Any]]:
    """Orderly wraps lists either as data.rows or as data itself."""
    if not isinstance(payload, dict):
        return []
    data = payload.get("data")
    if isinstance(data, dict):
        rows = data.get("rows")
        return rows if isinstance(rows, list) else []
    if isinstance(data, list):
        return data
    return []


class OrderlyDirectExchange(DirectAPIExchange):
    """
    Orderly Network (EVM order-book DEX) direct API connector.
    
    API Docs: https://orderly.network/docs/build-on-omnichain/evm-api/restful-api/public
    
    Endpoints used:
    - GET /v1/public/funding_rates - Funding rates for all perpetual markets
    - GET /v1/public/futures - Market info, used for open interest
    
    Symbols look like PERP_BTC_USDC.
    """
    
    name = "orderly"
    display_name = "Orderly"
    base_url = "https://api-evm.orderly.org"
    
    async def _fetch_rates(self) -> List[RateQuote]:
        rates_data, futures_data = await asyncio.gather(
            self._request("GET", f"{self.base_url}/v1/public/funding_rates"),
            self._request_optional("GET", f"{self.base_url}/v1/public/futures"),
        )
        
        if not isinstance(rates_data, dict) or "data" not in rates_data:
            raise MalformedResponse(self.name, "funding_rates payload has no data")
        
        # Open interest by venue symbol, defaults to 0 when futures is unavailable
        oi_map: Dict[str, float] = {}
        for market in _extract_rows(futures_data):
            symbol = first_present(market, "symbol", "instrument_id") or ""
            oi_map[symbol] = to_number(first_present(market, "open_interest", "openInterest"))
        
        quotes = []
        for row in _extract_rows(rates_data):
            symbol = first_present(row, "symbol", "instrument_id", "market")
            if not symbol:
                continue
            
            rate = to_number(first_present(
                row,
                "last_funding_rate",
                "est_funding_rate",
                "funding_rate",
                "fundingRate",
                "rate",
            ))
            
            quotes.append(RateQuote(
                asset=self._normalize_symbol(symbol),
                exchange_symbol=symbol,
                rate_per_interval=rate,
                open_interest_usd=max(oi_map.get(symbol, 0.0), 0.0),
                exchange=self.name,
            ))
        
        return quotes
