"""Exceptions raised by the portfolio distributer."""


class DistributerError(Exception):
    """Base class for errors that end a distribution run."""
    pass


class PriceUnavailableError(DistributerError, ValueError):
    """Raised when a ticker has no usable (positive) price"""

    def __init__(self, ticker: str) -> None:
        super().__init__(f"{ticker} does not have a price")
        self.ticker = ticker


class PriceSourceError(DistributerError):
    """Raised when the price source cannot be reached or decoded"""
    pass


class SnapshotError(DistributerError):
    """Raised when a ranking or portfolio snapshot is malformed"""
    pass
