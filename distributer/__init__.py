"""
Portfolio Distributer - rebalance a portfolio toward equal weights across a ranked list of tickers.

Exports:
    Position: Dataclass representing a ticker and a held quantity
    Operation: Dataclass representing a buy/sell instruction
    Portfolio: Holdings plus the ranking they are balanced into
    distribute: The equal-weight distribution engine
    MissingPricePolicy: What to do with tickers that have no price
    PriceSource: Abstract base class for price sources
    BrapiPriceSource: Prices from the brapi.dev quote API
"""

from .config import BrapiConfig, DistributerConfig, MissingPricePolicy
from .engine import distribute
from .exceptions import (
    DistributerError,
    PriceSourceError,
    PriceUnavailableError,
    SnapshotError,
)
from .models import Operation, Position
from .portfolio import Portfolio
from .pricing import BrapiPriceSource, PriceSource

__all__ = [
    "Position",
    "Operation",
    "Portfolio",
    "distribute",
    "MissingPricePolicy",
    "BrapiConfig",
    "DistributerConfig",
    "DistributerError",
    "PriceSourceError",
    "PriceUnavailableError",
    "SnapshotError",
    "PriceSource",
    "BrapiPriceSource",
]
