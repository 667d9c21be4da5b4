"""Services for funding rate arbitrage analysis."""

from .aggregator import build_unified_table
from .arbitrage_analyzer import AnalyzerConfig, ArbitrageAnalyzer, compute_opportunities
from .ranking import SortDirection, SortKey, sort_opportunities
from .refresh_service import RefreshService
from .yield_calculator import estimate_annual_on, project, project_opportunity

__all__ = [
    "build_unified_table",
    "AnalyzerConfig",
    "ArbitrageAnalyzer",
    "compute_opportunities",
    "SortDirection",
    "SortKey",
    "sort_opportunities",
    "RefreshService",
    "estimate_annual_on",
    "project",
    "project_opportunity",
]
