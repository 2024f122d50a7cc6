#!/usr/bin/env python3
import argparse
import logging
import os
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

from rich.console import Console

from distributer import (
    BrapiConfig,
    BrapiPriceSource,
    DistributerConfig,
    DistributerError,
    MissingPricePolicy,
    Portfolio,
)
from distributer.pricing import PriceSource
from distributer.report import render_report
from distributer.snapshots import (
    current_snapshot_name,
    load_portfolio,
    load_ranking,
    previous_snapshot_name,
    save_portfolio,
)

logger = logging.getLogger(__name__)
console = Console()

CONFIG = DistributerConfig()


def _cash(value: str) -> Decimal:
    try:
        cash = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    if not cash.is_finite() or cash < 0:
        raise argparse.ArgumentTypeError(f"amount must be a non-negative number: {value!r}")
    return cash


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="distribute",
        description="Rebalance a portfolio toward equal weights across a ranked list of tickers.",
    )
    parser.add_argument("amount", type=_cash, help="cash to deploy")
    parser.add_argument(
        "--file",
        default=None,
        help="portfolio snapshot to start from (default: previous month's snapshot)",
    )
    parser.add_argument(
        "--ranking", default=CONFIG.RANKING_FILE, help="ranking JSON file"
    )
    parser.add_argument(
        "--output-dir",
        default=CONFIG.SNAPSHOT_DIR,
        help="directory where this month's snapshot is written",
    )
    parser.add_argument(
        "--skip-missing-prices",
        action="store_true",
        help="leave unpriced tickers untouched instead of aborting",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="render the result without saving it"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def run(args: argparse.Namespace, price_source: PriceSource) -> Path | None:
    """Load snapshots, price them, distribute, render and save.

    Returns:
        Path of the written snapshot, or None on a dry run.
    """
    snapshot = args.file or str(Path(args.output_dir) / previous_snapshot_name())

    portfolio = Portfolio(load_portfolio(snapshot), load_ranking(args.ranking))
    logger.info("Loaded %d positions from %s", len(portfolio.positions), snapshot)

    with console.status("[bold]Fetching prices...[/bold]"):
        prices = price_source.fetch(portfolio.tickers())
    logger.info("Current portfolio value: %s", portfolio.total_value(prices))

    policy = (
        MissingPricePolicy.SKIP if args.skip_missing_prices else MissingPricePolicy.FAIL
    )
    balanced, operations = portfolio.rebalance(args.amount, prices, policy)

    render_report(
        console, portfolio.positions, balanced.positions, operations, prices, args.amount
    )

    if args.dry_run:
        return None

    output = save_portfolio(
        Path(args.output_dir) / current_snapshot_name(), balanced.positions
    )
    console.print(f"[dim]Saved rebalanced portfolio to {output}[/dim]")
    return output


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI application."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    price_source = BrapiPriceSource(BrapiConfig(token=os.environ.get("BRAPI_TOKEN")))

    try:
        run(args, price_source)
    except DistributerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
