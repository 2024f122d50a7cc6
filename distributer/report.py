"""Rich rendering of portfolios and operations."""

import logging
from decimal import Decimal
from typing import Callable, Mapping, Sequence

from rich import box
from rich.columns import Columns
from rich.console import Console, RenderableType
from rich.table import Table
from rich.text import Text

from .models import Operation, Position

logger = logging.getLogger(__name__)

MISSING = "-"


def _money(value: Decimal | None) -> str:
    return MISSING if value is None else f"{value:,.2f}"


def portfolio_table(
    title: str, portfolio: Sequence[Position], prices: Mapping[str, Decimal]
) -> Table:
    """Build a table of positions sorted by total value, largest first."""
    t = Table(title=title, box=box.ROUNDED, title_style="bold white")
    t.add_column("Ticker", style="cyan")
    t.add_column("Shares", justify="right")
    t.add_column("Price", justify="right")
    t.add_column("Total", justify="right")

    rows = []
    grand_total = Decimal("0")
    for position in portfolio:
        price = prices.get(position.ticker)
        total = position.value(price) if price is not None else None
        grand_total += total or Decimal("0")
        rows.append((position, price, total))

    rows.sort(key=lambda row: row[2] if row[2] is not None else Decimal("-1"), reverse=True)

    for position, price, total in rows:
        t.add_row(position.ticker, str(position.amount), _money(price), _money(total))

    t.add_section()
    t.add_row("", "", "Total", f"[bold]{grand_total:,.2f}[/bold]")
    return t


def operations_table(
    operations: Sequence[Operation], prices: Mapping[str, Decimal]
) -> Table:
    """Build a table of buy/sell operations in execution order."""
    t = Table(title="Operations", box=box.ROUNDED, title_style="bold white")
    t.add_column("Action", no_wrap=True)
    t.add_column("Ticker", style="cyan")
    t.add_column("Shares", justify="right")
    t.add_column("Price", justify="right")
    t.add_column("Total", justify="right")

    buy_total = sell_total = Decimal("0")
    for op in operations:
        price = prices.get(op.ticker)
        total = Decimal(op.quantity) * price if price is not None else None
        if total is not None:
            if op.action == "BUY":
                buy_total += total
            else:
                sell_total += total

        style = "green" if op.action == "BUY" else "red"
        t.add_row(
            Text(op.action, style=f"bold {style}"),
            op.ticker,
            str(op.quantity),
            _money(price),
            _money(total),
        )

    t.add_section()
    t.add_row(
        "",
        "[bold]Trades[/bold]",
        "",
        "",
        f"[green]+{buy_total:,.2f}[/green]  [red]-{sell_total:,.2f}[/red]",
    )
    return t


def _build_or_fallback(build: Callable[[], RenderableType], fallback: str) -> RenderableType:
    try:
        return build()
    except Exception:
        logger.warning("Rendering failed: %s", fallback, exc_info=True)
        return Text(fallback, style="yellow")


def render_report(
    console: Console,
    original: Sequence[Position],
    balanced: Sequence[Position],
    operations: Sequence[Operation],
    prices: Mapping[str, Decimal],
    cash: Decimal,
) -> None:
    """Print the current and rebalanced portfolios followed by the operations."""
    console.print()
    console.print(f"Allocation amount: [bold green]{cash:,.2f}[/bold green]")
    console.print()

    current = _build_or_fallback(
        lambda: portfolio_table("Current portfolio", original, prices),
        "Could not render the current portfolio table",
    )
    rebalanced = _build_or_fallback(
        lambda: portfolio_table("Rebalanced portfolio", balanced, prices),
        "Could not render the rebalanced portfolio table",
    )
    console.print(Columns([current, rebalanced], padding=(0, 5)))
    console.print()

    if not operations:
        console.print("[green]  Already balanced, no operations needed.[/green]")
        return

    console.print(
        _build_or_fallback(
            lambda: operations_table(operations, prices),
            "Could not render the operations",
        )
    )
