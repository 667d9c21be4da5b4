"""Tests for environment-driven configuration."""

from funding_arb.config import (
    DEFAULT_ENABLED_SOURCES,
    DEFAULT_EXCHANGE_PRIORITY,
    Config,
    get_config,
    reload_config,
)
from funding_arb.services.arbitrage_analyzer import AnalyzerConfig


class TestConfig:

    def test_defaults(self, monkeypatch):
        for key in ("ARB_MIN_SPREAD", "ENABLED_SOURCES", "REQUIRED_SOURCES",
                    "FUNDING_INTERVAL_HOURS", "FUNDING_FETCH_TIMEOUT",
                    "FUNDING_REFRESH_INTERVAL", "ARB_EXCHANGE_PRIORITY"):
            monkeypatch.delenv(key, raising=False)

        config = Config()

        assert config.arbitrage.min_spread == 0.5
        assert config.arbitrage.exchange_priority == DEFAULT_EXCHANGE_PRIORITY
        assert config.sources.enabled_sources == DEFAULT_ENABLED_SOURCES
        assert config.sources.required_sources == ["orderly", "lighter"]
        assert config.funding.interval_hours == 8
        assert config.funding.fetch_timeout == 10.0
        assert config.funding.refresh_interval == 60
        assert config.funding.annualization_factor == 3 * 365

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ARB_MIN_SPREAD", "2.5")
        monkeypatch.setenv("ENABLED_SOURCES", "Orderly, hyperliquid")
        monkeypatch.setenv("FUNDING_FETCH_TIMEOUT", "3")

        config = Config()

        assert config.arbitrage.min_spread == 2.5
        assert config.sources.enabled_sources == ["orderly", "hyperliquid"]
        assert config.funding.fetch_timeout == 3.0

    def test_list_duplicates_are_dropped(self, monkeypatch):
        monkeypatch.setenv("ARB_EXCHANGE_PRIORITY", "orderly,lighter,Orderly")

        config = Config()

        assert config.arbitrage.exchange_priority == ["orderly", "lighter"]

    def test_invalid_number_falls_back(self, monkeypatch):
        monkeypatch.setenv("FUNDING_INTERVAL_HOURS", "eight")
        assert Config().funding.interval_hours == 8

    def test_reload(self, monkeypatch):
        monkeypatch.setenv("ARB_MIN_SPREAD", "1.5")
        try:
            config = reload_config()
            assert get_config() is config
            assert AnalyzerConfig.from_config().min_spread == 1.5
        finally:
            monkeypatch.delenv("ARB_MIN_SPREAD")
            reload_config()
