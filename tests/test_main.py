"""Tests for CLI helpers."""

from rich.console import Console

import funding_arb.main as main_module
from funding_arb.main import create_parser, format_compact, format_percent, list_sources


class TestFormatting:

    def test_format_percent(self):
        assert format_percent(21.9) == "+21.90%"
        assert format_percent(-3.456) == "-3.46%"

    def test_format_compact(self):
        assert format_compact(0) == "—"
        assert format_compact(950) == "$950"
        assert format_compact(12_000) == "$12K"
        assert format_compact(3_400_000) == "$3.4M"
        assert format_compact(2_100_000_000) == "$2.1B"


class TestParser:

    def test_defaults(self):
        args = create_parser().parse_args([])
        assert args.sort == "spread"
        assert args.direction == "desc"
        assert args.min_spread is None
        assert not args.watch

    def test_calc(self):
        args = create_parser().parse_args(["--calc", "btc", "--capital", "5000", "--fee", "0.02"])
        assert args.calc == "btc"
        assert args.capital == 5000
        assert args.fee == 0.02


class TestListSources:

    def test_shows_exchange_metadata(self, monkeypatch):
        recorder = Console(record=True, width=160)
        monkeypatch.setattr(main_module, "console", recorder)

        list_sources()

        output = recorder.export_text()
        assert "orderly" in output
        assert "Binance" in output
        assert "CEX" in output
        assert "~0.02%" in output
