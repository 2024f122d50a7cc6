"""Equal-weight distribution engine.

Given the current holdings, a priority-ordered ranking of tickers, an amount of
new cash and a price map, compute the rebalanced portfolio and the operations
that produce it.

The pass is a strictly sequential fold over the ranking: every ticker consumes
(or, when sold, replenishes) a single running budget, so earlier tickers are
funded before later ones.

    total   = cash + sum(price[t] * amount[t])
    target  = total / len(ranking)
    delta   = min(|target - price[t] * amount[t]|, remaining)
    shares  = floor(delta / price[t])            (lot-rounded above LOT_SIZE)
"""

import logging
import math
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from .config import DistributerConfig, MissingPricePolicy
from .exceptions import PriceUnavailableError
from .models import Operation, Position

logger = logging.getLogger(__name__)

LOT_SIZE = DistributerConfig.LOT_SIZE


def lot_round(shares: int, lot_size: int = LOT_SIZE) -> int:
    """Round share counts above one lot down to a whole number of lots."""
    if shares > lot_size:
        shares -= shares % lot_size
    return shares


def portfolio_value(
    portfolio: Iterable[Position], prices: Mapping[str, Decimal]
) -> Decimal:
    """Market value of the portfolio; unpriced positions count as zero."""
    return sum(
        (p.value(prices[p.ticker]) for p in portfolio if p.ticker in prices),
        start=Decimal("0"),
    )


def _check_unique(tickers: Sequence[str], what: str) -> None:
    seen: set[str] = set()
    for ticker in tickers:
        if ticker in seen:
            raise ValueError(f"Ticker {ticker} appears more than once in the {what}")
        seen.add(ticker)


def _usable_prices(
    tickers: Iterable[str],
    prices: Mapping[str, Decimal],
    missing_price: MissingPricePolicy,
) -> dict[str, Decimal]:
    """Keep only positive prices, failing or warning on the rest."""
    usable: dict[str, Decimal] = {}

    for ticker in tickers:
        price = prices.get(ticker)
        if price is not None and price > 0:
            usable[ticker] = Decimal(str(price))
            continue

        if missing_price is MissingPricePolicy.FAIL:
            raise PriceUnavailableError(ticker)
        logger.warning("%s does not have a price, skipping", ticker)

    return usable


def distribute(
    portfolio: Sequence[Position],
    ranking: Sequence[str],
    cash: Decimal,
    prices: Mapping[str, Decimal],
    missing_price: MissingPricePolicy = MissingPricePolicy.FAIL,
    lot_size: int = LOT_SIZE,
) -> tuple[list[Position], list[Operation]]:
    """Distribute holdings plus new cash equally across the ranking.

    Args:
        portfolio: Current holdings, one Position per ticker.
        ranking: Priority-ordered tickers eligible for allocation.
        cash: New money to deploy (non-negative).
        prices: Latest price per ticker.
        missing_price: FAIL raises PriceUnavailableError for any ranked or held
            ticker without a positive price. SKIP leaves such tickers untouched
            (held ones outside the ranking are still sold).
        lot_size: Share counts above this are rounded down to whole lots, and
            over-target tickers are only sold in at least one lot.

    Returns:
        Tuple of (balanced portfolio, operations). Operations follow ranking
        order, then liquidation sells in portfolio order.
    """
    if not ranking:
        raise ValueError("Ranking must contain at least one ticker")

    cash = Decimal(str(cash))
    if cash < 0:
        raise ValueError(f"Cash must be non-negative, got {cash}")

    _check_unique([p.ticker for p in portfolio], "portfolio")
    _check_unique(ranking, "ranking")

    holdings = {p.ticker: p.amount for p in portfolio}
    usable = _usable_prices(
        list(ranking) + [t for t in holdings if t not in ranking],
        prices,
        missing_price,
    )

    total_value = cash + portfolio_value(portfolio, usable)
    target = total_value / len(ranking)
    remaining = total_value

    logger.debug("Distributing %s (target %s per ticker)", total_value, target)

    balanced: list[Position] = []
    operations: list[Operation] = []
    visited: set[str] = set()

    for ticker in ranking:
        if remaining == 0:
            break

        visited.add(ticker)
        current_amount = holdings.get(ticker, 0)

        price = usable.get(ticker)
        if price is None:
            if ticker in holdings:
                balanced.append(Position(ticker, current_amount))
            continue

        current_value = price * current_amount

        desired = min(abs(target - current_value), remaining)
        shares = lot_round(math.floor(desired / price), lot_size)
        trade_value = Decimal(math.floor(shares * price))

        if current_value >= target and shares >= lot_size:
            balanced.append(Position(ticker, current_amount - shares))
            operations.append(Operation("SELL", ticker, shares))
            remaining += trade_value
        elif target >= current_value:
            balanced.append(Position(ticker, current_amount + shares))
            operations.append(Operation("BUY", ticker, shares))
            remaining -= trade_value
        else:
            # Above target by less than a lot
            balanced.append(Position(ticker, current_amount))

        logger.debug(
            "%s: price=%s held=%d shares=%d remaining=%s",
            ticker, price, current_amount, shares, remaining,
        )

    # Budget ran out before these were reached; they stay in the universe.
    for ticker in ranking:
        if ticker not in visited and ticker in holdings:
            balanced.append(Position(ticker, holdings[ticker]))

    ranked = set(ranking)
    for position in portfolio:
        if position.ticker not in ranked:
            operations.append(Operation("SELL", position.ticker, position.amount))

    return balanced, operations
