"""Abstract base class for price sources."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable


class PriceSource(ABC):
    """Abstract base class for market price sources."""

    @abstractmethod
    def fetch(self, tickers: Iterable[str]) -> dict[str, Decimal]:
        """Fetch the latest price for each ticker.

        Args:
            tickers: Ticker symbols to price.

        Returns:
            Dictionary mapping ticker to price. Tickers the source cannot
            resolve are omitted.
        """
        pass
