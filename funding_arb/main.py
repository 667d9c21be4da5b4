"""
Funding Rate Arbitrage Scanner - Main Entry Point

Fetches funding rates from the configured sources and shows cross-exchange
arbitrage opportunities.

Usage:
    # Scan once with the configured sources
    python -m funding_arb.main

    # Sort by open interest, ascending
    python -m funding_arb.main --sort oi --direction asc

    # Sort by one exchange's annualized rate
    python -m funding_arb.main --sort hyperliquid

    # Project earnings for one asset
    python -m funding_arb.main --calc BTC --capital 25000 --fee 0.05

    # Keep refreshing every FUNDING_REFRESH_INTERVAL seconds
    python -m funding_arb.main --watch
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, List, Optional

from dotenv import load_dotenv
from rich.panel import Panel
from rich.table import Table

from funding_arb.config import get_config, reload_config
from funding_arb.exceptions import RefreshFailed
from funding_arb.exchanges import ExchangeRegistry
from funding_arb.exchanges.metadata import EXCHANGES, display_name
from funding_arb.models import Opportunity, OpportunitySnapshot
from funding_arb.services import (
    AnalyzerConfig,
    ArbitrageAnalyzer,
    RefreshService,
    estimate_annual_on,
    project_opportunity,
)
from funding_arb.utils import get_console, get_logger, setup_logger

console = get_console()

TOP_CARDS = 5


def format_percent(value: float) -> str:
    """Signed percent with two decimals."""
    return f"{value:+.2f}%"


def format_compact(value: Optional[float]) -> str:
    """Format a USD amount in compact form."""
    if not value:
        return "—"
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.1f}B"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"${value / 1_000:.0f}K"
    return f"${value:.0f}"


def format_currency(value: float) -> str:
    return f"${value:,.2f}"


def _rate_cell(opp: Opportunity, exchange: str) -> str:
    rate = opp.rate_by_exchange.get(exchange)
    if rate is None:
        return "[dim]—[/]"
    color = "green" if rate > 0 else "red" if rate < 0 else "dim"
    return f"[{color}]{format_percent(rate)}[/]"


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    config = get_config()
    parser = argparse.ArgumentParser(
        description="Find cross-exchange funding rate arbitrage opportunities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Scan configured sources once
  %(prog)s --sort oi                # Sort by minimum open interest
  %(prog)s --sort lighter           # Sort by Lighter's annualized rate
  %(prog)s -s orderly lighter       # Only fetch Orderly and the Lighter proxy
  %(prog)s --calc ETH --capital 5000
  %(prog)s --watch                  # Auto-refresh
        """
    )

    parser.add_argument(
        "-s", "--sources",
        nargs="+",
        metavar="SOURCE",
        help="Sources to fetch (default: ENABLED_SOURCES)",
    )

    parser.add_argument(
        "--sort",
        default="spread",
        metavar="KEY",
        help="Sort key: spread, oi, or an exchange id (default: spread)",
    )

    parser.add_argument(
        "--direction",
        choices=["asc", "desc"],
        default="desc",
        help="Sort direction (default: desc)",
    )

    parser.add_argument(
        "--min-spread",
        type=float,
        default=None,
        metavar="PERCENT",
        help=f"Minimum annualized spread (default: {config.arbitrage.min_spread}%%)",
    )

    parser.add_argument(
        "--top",
        type=int,
        default=config.arbitrage.default_limit,
        metavar="N",
        help="Number of opportunities to display",
    )

    parser.add_argument(
        "--calc",
        metavar="ASSET",
        help="Project earnings for one asset's spread",
    )

    parser.add_argument(
        "--capital",
        type=float,
        default=config.calculator.default_capital,
        metavar="USD",
        help="Capital for the yield projection",
    )

    parser.add_argument(
        "--fee",
        type=float,
        default=config.calculator.default_fee_percent,
        metavar="PERCENT",
        help="Fee per fill in percent for the yield projection",
    )

    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep refreshing until interrupted",
    )

    parser.add_argument(
        "--list-sources",
        action="store_true",
        help="List known sources and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output for debugging",
    )

    return parser


def list_sources() -> None:
    """Display list of known sources."""
    config = get_config()
    table = Table(title="Sources", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Display Name", style="green")
    table.add_column("Enabled")
    table.add_column("Required")

    for name in ExchangeRegistry.get_all_names():
        source_class = ExchangeRegistry.get_source_class(name)
        enabled = name in config.sources.enabled_sources
        required = name in config.sources.required_sources
        table.add_row(
            name,
            source_class.display_name,
            "[green]yes[/]" if enabled else "[dim]no[/]",
            "[yellow]required[/]" if required else "[dim]optional[/]",
        )

    console.print(table)

    exchanges = Table(title="Exchanges", show_header=True, header_style="bold cyan")
    exchanges.add_column("Id", style="cyan")
    exchanges.add_column("Name", style="green")
    exchanges.add_column("Type")
    exchanges.add_column("Taker Fee", justify="right")

    for info in EXCHANGES.values():
        exchanges.add_row(
            info.name,
            info.display_name,
            info.venue_type,
            f"[magenta]{info.fee_note}[/]" if info.zero_fee else info.fee_note,
        )

    console.print(exchanges)


def display_opportunities(
    opportunities: List[Opportunity],
    snapshot: OpportunitySnapshot,
    top_n: int,
    stats: Optional[Dict] = None,
) -> None:
    """Display opportunities in a formatted table."""
    best = snapshot.best
    summary = (
        f"[bold]Matched assets:[/] {snapshot.matched_count}    "
        f"[bold]Best spread:[/] "
        f"{f'{best.asset} {format_percent(best.spread_percent)}' if best else '—'}    "
        f"[bold]Refreshed:[/] {snapshot.refreshed_at:%H:%M:%S} UTC"
    )
    if stats:
        summary += (
            f"\n[dim]{stats['total_rates']} rates from {stats['sources']} sources "
            f"({stats['failed_sources']} failed) · {stats['exchanges']} exchanges · "
            f"{stats['multi_exchange_assets']}/{stats['unique_assets']} assets on 2+ exchanges[/]"
        )
    console.print(Panel(
        summary,
        title="Funding Rate Arbitrage",
        border_style="cyan",
    ))

    if not opportunities:
        console.print("[yellow]No arbitrage opportunities found matching criteria.[/]")
        return

    exchanges = [name for name in EXCHANGES if name in snapshot.table]
    exchanges.extend(sorted(set(snapshot.table) - set(exchanges)))

    table = Table(
        title=f"Top {min(top_n, len(opportunities))} Opportunities (annualized)",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Asset", style="cyan")
    for name in exchanges:
        table.add_column(display_name(name), justify="right")
    table.add_column("Spread", justify="right", style="bold yellow")
    table.add_column("Strategy")
    table.add_column("Min OI", justify="right", style="dim")

    for opp in opportunities[:top_n]:
        fee_note = " [magenta]0% FEE[/]" if opp.has_zero_fee_leg else ""
        table.add_row(
            opp.asset,
            *[_rate_cell(opp, name) for name in exchanges],
            f"{format_percent(opp.spread_percent)}{fee_note}",
            f"[red]S[/] {display_name(opp.short_leg.exchange)} "
            f"[green]L[/] {display_name(opp.long_leg.exchange)}",
            format_compact(opp.min_open_interest_usd),
        )

    console.print(table)
    display_top_cards(snapshot)


def display_top_cards(snapshot: OpportunitySnapshot) -> None:
    """Display the highest-spread opportunities as short summaries."""
    top = sorted(snapshot.opportunities, key=lambda o: o.spread_percent, reverse=True)[:TOP_CARDS]
    for opp in top:
        rates = " · ".join(
            f"{display_name(leg.exchange)}: {format_percent(leg.annualized_rate_percent)}"
            for leg in opp.legs
        )
        oi = f" · OI: {format_compact(opp.min_open_interest_usd)}" if opp.min_open_interest_usd > 0 else ""
        zero_fee = "  [magenta]0% FEE LEG[/]" if opp.has_zero_fee_leg else ""
        console.print(Panel(
            f"Short {display_name(opp.short_leg.exchange)} · Long {display_name(opp.long_leg.exchange)}"
            f"{zero_fee}\n[dim]{rates}[/]\n"
            f"${estimate_annual_on(opp):,.0f}/yr on $10k{oi}",
            title=f"{opp.asset}  {format_percent(opp.spread_percent)} APY",
            border_style="green",
            expand=False,
        ))


def display_projection(opp: Opportunity, capital: float, fee: float) -> None:
    """Display the yield projection for one opportunity."""
    result = project_opportunity(opp, capital, fee)

    table = Table(
        title=f"{opp.asset}: {format_currency(capital)} at {opp.spread_percent:.2f}% spread",
        show_header=False,
    )
    table.add_column("Horizon", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_row("Daily", format_currency(result.daily_earn))
    table.add_row("Weekly", format_currency(result.weekly_earn))
    table.add_row("Monthly", format_currency(result.monthly_earn))
    table.add_row("Yearly", format_currency(result.annual_earn))
    table.add_row("Fees (entry/exit)", format_currency(result.total_fees))
    table.add_row("[bold]Net Annual[/]", f"[bold]{format_currency(result.net_annual)}[/]")
    console.print(table)


def display_errors(snapshot: OpportunitySnapshot) -> None:
    """Display sources that failed during the last cycle."""
    failed = snapshot.failed_sources
    if failed:
        console.print("\n[bold red]Source errors:[/]")
        for name, error in failed.items():
            console.print(f"  [red]• {name}:[/] {error}")


def render(service: RefreshService, args: argparse.Namespace) -> int:
    """Render the current snapshot. Returns the exit code."""
    snapshot = service.snapshot
    if snapshot is None:
        console.print("[red]No data available yet.[/]")
        return 1

    try:
        opportunities = service.get_opportunities(args.sort, args.direction)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        return 2

    if args.calc:
        asset = args.calc.upper()
        match = next((o for o in snapshot.opportunities if o.asset == asset), None)
        if match is None:
            console.print(f"[yellow]No opportunity for {asset}.[/]")
            return 1
        display_projection(match, args.capital, args.fee)
    else:
        display_opportunities(opportunities, snapshot, args.top, service.get_info()["stats"])

    display_errors(snapshot)
    return 0


async def main_async(args: argparse.Namespace) -> int:
    """Async main function."""
    config = get_config()
    setup_logger(level=logging.DEBUG if args.verbose or config.debug else config.log_level)
    logger = get_logger()

    if args.list_sources:
        list_sources()
        return 0

    registry = ExchangeRegistry.from_config(config, sources=args.sources)
    if not registry.names:
        logger.error("[red]No sources available to fetch from[/]")
        return 1

    analyzer_config = AnalyzerConfig.from_config()
    if args.min_spread is not None:
        analyzer_config.min_spread = args.min_spread

    service = RefreshService(registry, analyzer=ArbitrageAnalyzer(analyzer_config))

    try:
        if not args.watch:
            try:
                await service.refresh()
            except RefreshFailed as e:
                logger.error(f"[red]{e}[/]")
                return 1
            return render(service, args)

        await service.start()
        last_rendered = None
        last_error = None
        while True:
            snapshot = service.snapshot
            if snapshot is not None and snapshot is not last_rendered:
                console.clear()
                render(service, args)
                last_rendered = snapshot
            error = service.last_error
            if error is not None and error is not last_error:
                console.print(f"[red]Refresh failed, showing previous data: {error}[/]")
            last_error = error
            await asyncio.sleep(1)
    finally:
        await service.stop()


def main() -> int:
    """Main entry point."""
    load_dotenv()
    reload_config()

    parser = create_parser()
    args = parser.parse_args()

    try:
        return asyncio.run(main_async(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
