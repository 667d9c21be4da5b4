"""Base class for funding rate sources."""

from abc import ABC, abstractmethod
from typing import List

from funding_arb.models import RateQuote


class BaseExchange(ABC):
    """Abstract base class for all funding rate sources."""
    
    name: str = "base"
    display_name: str = "Base Exchange"
    
    @abstractmethod
    async def fetch_rates(self) -> List[RateQuote]:
        """
        Fetch all available funding rates from the source.
        
        Returns:
            List of normalized quotes
            
        Raises:
            SourceUnavailable: on network errors, bad status or timeout
            MalformedResponse: when the payload has an unexpected shape
        """
        pass
    
    async def close(self) -> None:
        """Release network resources held by the source."""
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"
