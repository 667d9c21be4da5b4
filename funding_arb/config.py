"""
Centralized configuration for the funding arbitrage scanner.

All constants, thresholds, and settings are defined here.
Values can be overridden via environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.getenv(key, str(default)).lower()
    return val in ("true", "1", "yes", "on")


def _env_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_list(key: str, default: Optional[List[str]] = None) -> List[str]:
    """Get comma-separated list from environment variable."""
    val = os.getenv(key, "")
    if not val:
        return list(default or [])
    items = [item.strip().lower() for item in val.split(",") if item.strip()]
    return list(dict.fromkeys(items))


# Tie-break order for legs with identical annualized rates
DEFAULT_EXCHANGE_PRIORITY = ["orderly", "hyperliquid", "lighter", "extended", "binance", "bybit"]

DEFAULT_ENABLED_SOURCES = ["orderly", "lighter", "extended"]
DEFAULT_REQUIRED_SOURCES = ["orderly", "lighter"]


@dataclass
class FundingConfig:
    """Funding rate related configuration."""
    # Every source is assumed to quote rates per 8h interval
    interval_hours: int = field(default_factory=lambda: _env_int("FUNDING_INTERVAL_HOURS", 8))

    # Per-source fetch timeout in seconds
    fetch_timeout: float = field(default_factory=lambda: _env_float("FUNDING_FETCH_TIMEOUT", 10.0))

    # Background refresh period in seconds
    refresh_interval: int = field(default_factory=lambda: _env_int("FUNDING_REFRESH_INTERVAL", 60))

    @property
    def payments_per_day(self) -> float:
        """Number of funding payments per day."""
        return 24 / self.interval_hours

    @property
    def annualization_factor(self) -> float:
        """Factor to convert a per-interval rate to a yearly one."""
        return self.payments_per_day * 365


@dataclass
class ArbitrageConfig:
    """Opportunity builder configuration."""
    # Minimum annualized spread in percentage points (0.5 = 0.5%)
    min_spread: float = field(default_factory=lambda: _env_float("ARB_MIN_SPREAD", 0.5))

    exchange_priority: List[str] = field(default_factory=lambda: _env_list(
        "ARB_EXCHANGE_PRIORITY", DEFAULT_EXCHANGE_PRIORITY
    ))

    # Default number of opportunities to show
    default_limit: int = field(default_factory=lambda: _env_int("ARB_DEFAULT_LIMIT", 20))


@dataclass
class SourceConfig:
    """Which sources are fetched and which of them must succeed."""
    enabled_sources: List[str] = field(default_factory=lambda: _env_list(
        "ENABLED_SOURCES", DEFAULT_ENABLED_SOURCES
    ))

    required_sources: List[str] = field(default_factory=lambda: _env_list(
        "REQUIRED_SOURCES", DEFAULT_REQUIRED_SOURCES
    ))


@dataclass
class CalculatorConfig:
    """Yield calculator defaults."""
    default_capital: float = field(default_factory=lambda: _env_float("CALC_DEFAULT_CAPITAL", 10_000.0))

    # Taker fee per fill, in percent
    default_fee_percent: float = field(default_factory=lambda: _env_float("CALC_DEFAULT_FEE", 0.04))


@dataclass
class Config:
    """Main configuration class."""
    funding: FundingConfig = field(default_factory=FundingConfig)
    arbitrage: ArbitrageConfig = field(default_factory=ArbitrageConfig)
    sources: SourceConfig = field(default_factory=SourceConfig)
    calculator: CalculatorConfig = field(default_factory=CalculatorConfig)

    # Debug mode
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", False))

    # Log level
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    _config = Config()
    return _config
