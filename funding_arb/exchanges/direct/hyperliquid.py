"""Hyperliquid DEX direct API connector."""

from typing import List

from funding_arb.exceptions import MalformedResponse
from funding_arb.models import RateQuote
from .base import DirectAPIExchange, first_present, to_number


class HyperliquidDirectExchange(DirectAPIExchange):
    """
    Hyperliquid DEX API direct connector.
    
    API Docs: https://hyperliquid.gitbook.io/hyperliquid-docs/
    
    Endpoints used:
    - POST /info {"type": "metaAndAssetCtxs"} - Universe and asset contexts
    
    Open interest is reported in coins and converted with the mark price.
    """
    
    name = "hyperliquid"
    display_name = "Hyperliquid"
    base_url = "https://api.hyperliquid.xyz"
    
    async def _fetch_rates(self) -> List[RateQuote]:
        data = await self._request(
            "POST",
            f"{self.base_url}/info",
            json={"type": "metaAndAssetCtxs"},
        )
        
        # data[0] contains meta info with universe
        # data[1] contains asset contexts with funding rates
        if not isinstance(data, list) or len(data) < 2:
            raise MalformedResponse(self.name, "expected [meta, assetCtxs]")
        
        meta, asset_ctxs = data[0] or {}, data[1]
        universe = meta.get("universe")
        if not isinstance(universe, list) or not isinstance(asset_ctxs, list):
            raise MalformedResponse(self.name, "universe or asset contexts missing")
        
        quotes = []
        for i, asset in enumerate(universe):
            coin_name = asset.get("name")
            if not coin_name:
                continue
            
            ctx = asset_ctxs[i] if i < len(asset_ctxs) else {}
            mark_price = to_number(first_present(ctx, "markPx", "markPrice"))
            open_interest = to_number(ctx.get("openInterest")) * mark_price
            
            quotes.append(RateQuote(
                asset=self._normalize_symbol(coin_name),
                exchange_symbol=coin_name,
                rate_per_interval=to_number(first_present(ctx, "funding", "fundingRate")),
                open_interest_usd=max(open_interest, 0.0),
                exchange=self.name,
            ))
        
        return quotes
