"""Lighter direct API connector."""

import asyncio
from typing import Any, Dict, List

from funding_arb.exceptions import MalformedResponse
from funding_arb.models import RateQuote
from .base import DirectAPIExchange, first_present, to_number


class LighterDirectExchange(DirectAPIExchange):
    """
    Lighter exchange direct API connector.
    
    API Docs: https://apidocs.lighter.xyz/reference/funding-rates
    
    Lighter is a zkSync-based perps exchange with zero trading fees. Its
    funding-rates endpoint aggregates rates from several venues, so this
    one source yields quotes for Lighter, Hyperliquid, Binance and Bybit.
    
    Endpoints used:
    - GET /api/v1/funding-rates - Funding rates for all venues
    - GET /api/v1/tickers - Lighter open interest per market
    """
    
    name = "lighter"
    display_name = "Lighter"
    base_url = "https://mainnet.zklighter.elliot.ai"
    
    # Venues reported by the aggregator endpoint
    exchanges = ("lighter", "hyperliquid", "binance", "bybit")
    
    async def _fetch_rates(self) -> List[RateQuote]:
        funding_data, tickers_data = await asyncio.gather(
            self._request("GET", f"{self.base_url}/api/v1/funding-rates"),
            self._request_optional("GET", f"{self.base_url}/api/v1/tickers"),
        )
        
        if not isinstance(funding_data, dict):
            raise MalformedResponse(self.name, "funding-rates payload is not an object")
        
        rates_list = funding_data.get("funding_rates")
        if not isinstance(rates_list, list):
            raise MalformedResponse(self.name, "funding-rates payload has no funding_rates list")
        
        oi_map = self._parse_open_interest(tickers_data)
        
        quotes = []
        skipped = 0
        for rate_data in rates_list:
            exchange = str(rate_data.get("exchange") or "").lower()
            if exchange not in self.exchanges:
                skipped += 1
                continue
            
            symbol = rate_data.get("symbol")
            if not symbol:
                continue
            
            # Tickers only describe Lighter's own markets
            open_interest = 0.0
            if exchange == "lighter":
                open_interest = oi_map.get(symbol, oi_map.get(str(rate_data.get("market_id")), 0.0))
            
            quotes.append(RateQuote(
                asset=self._normalize_symbol(symbol),
                exchange_symbol=symbol,
                rate_per_interval=to_number(rate_data.get("rate")),
                open_interest_usd=max(open_interest, 0.0),
                exchange=exchange,
            ))
        
        if skipped:
            self._logger.debug(f"{self.display_name}: skipped {skipped} rates from unknown venues")
        
        return quotes
    
    def _parse_open_interest(self, tickers_data: Any) -> Dict[str, float]:
        """Map Lighter symbol (or market id) to open interest in USD."""
        oi_map: Dict[str, float] = {}
        if not isinstance(tickers_data, dict):
            return oi_map
        
        for ticker in tickers_data.get("tickers") or []:
            key = first_present(ticker, "symbol", "market_id")
            if key is None:
                continue
            oi_map[str(key)] = to_number(
                ticker.get("open_interest_usd") or ticker.get("openInterest") or 0
            )
        return oi_map
