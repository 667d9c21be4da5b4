"""Extended Exchange direct API connector."""

from typing import List

from funding_arb.exceptions import MalformedResponse
from funding_arb.models import RateQuote
from .base import DirectAPIExchange, to_number


class ExtendedDirectExchange(DirectAPIExchange):
    """
    Extended Exchange (hybrid CLOB on Starknet) direct API connector.
    
    Endpoints used:
    - GET /api/v1/info/markets - All markets with funding rate and open interest
    """
    
    name = "extended"
    display_name = "Extended"
    base_url = "https://api.starknet.extended.exchange"
    
    async def _fetch_rates(self) -> List[RateQuote]:
        data = await self._request("GET", f"{self.base_url}/api/v1/info/markets")
        
        # Payload is either a bare list or wrapped in {"data": [...]}
        markets = data.get("data") if isinstance(data, dict) else data
        if not isinstance(markets, list):
            raise MalformedResponse(self.name, "markets payload is not a list")
        
        quotes = []
        for market in markets:
            if not market.get("active") or market.get("status") != "ACTIVE":
                continue
            
            symbol = market.get("name") or ""
            asset = market.get("assetName") or symbol
            if not asset:
                continue
            
            stats = market.get("marketStats") or {}
            quotes.append(RateQuote(
                asset=self._normalize_symbol(asset),
                exchange_symbol=symbol or asset,
                rate_per_interval=to_number(stats.get("fundingRate")),
                open_interest_usd=max(to_number(stats.get("openInterest")), 0.0),
                exchange=self.name,
            ))
        
        return quotes
