from decimal import Decimal
from typing import Iterable, Mapping, Optional

from .config import MissingPricePolicy
from .engine import distribute, portfolio_value
from .models import Operation, Position


class Portfolio:
    """Current holdings together with the ranked universe they are balanced into."""

    def __init__(
        self,
        positions: Optional[Iterable[Position]] = None,
        ranking: Optional[Iterable[str]] = None,
    ) -> None:
        self.positions: list[Position] = []
        self.ranking: list[str] = []

        for position in positions or []:
            self.add_position(position)
        if ranking is not None:
            self.set_ranking(ranking)

    def add_position(self, position: Position) -> None:
        if any(p.ticker == position.ticker for p in self.positions):
            raise ValueError(f"Ticker {position.ticker} is already held")
        self.positions.append(position)

    def set_ranking(self, ranking: Iterable[str]) -> None:
        ranking = list(ranking)
        if not ranking:
            raise ValueError("Ranking must contain at least one ticker")
        if len(set(ranking)) != len(ranking):
            raise ValueError("Ranking must not repeat tickers")

        self.ranking = ranking

    def tickers(self) -> list[str]:
        """Ranked tickers followed by held tickers outside the ranking."""
        tickers = list(self.ranking)
        tickers.extend(
            p.ticker for p in self.positions if p.ticker not in self.ranking
        )
        return tickers

    def total_value(self, prices: Mapping[str, Decimal]) -> Decimal:
        return portfolio_value(self.positions, prices)

    def rebalance(
        self,
        cash: Decimal,
        prices: Mapping[str, Decimal],
        missing_price: MissingPricePolicy = MissingPricePolicy.FAIL,
    ) -> tuple["Portfolio", list[Operation]]:
        """Distribute holdings plus cash equally across the ranking.

        Args:
            cash: New money to deploy.
            prices: Latest price per ticker, covering tickers().
            missing_price: How to treat tickers without a usable price.

        Returns:
            Tuple of (balanced Portfolio with the same ranking, operations).
        """
        if not self.ranking:
            raise ValueError("No ranking set. Call set_ranking() first.")

        balanced, operations = distribute(
            self.positions, self.ranking, cash, prices, missing_price
        )
        return Portfolio(balanced, self.ranking), operations

    def __repr__(self) -> str:
        return (
            f"Portfolio(positions={[(p.ticker, p.amount) for p in self.positions]}, "
            f"ranking={self.ranking})"
        )
