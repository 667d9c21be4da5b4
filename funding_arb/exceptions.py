"""Exceptions raised by source adapters and the refresh service."""

from typing import Dict


class FundingArbError(Exception):
    """Base exception for the funding arbitrage scanner."""


class SourceUnavailable(FundingArbError):
    """A source could not be reached: network error, bad status or timeout."""
    
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class MalformedResponse(SourceUnavailable):
    """A source answered, but the payload did not have the expected shape."""


class RefreshFailed(FundingArbError):
    """A required source failed, so the refresh cycle was aborted."""
    
    def __init__(self, failed_sources: Dict[str, str]):
        self.failed_sources = dict(failed_sources)
        details = ", ".join(f"{name} ({error})" for name, error in self.failed_sources.items())
        super().__init__(f"Refresh aborted, required sources failed: {details}")
