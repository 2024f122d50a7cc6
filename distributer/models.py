"""Data models for the portfolio distributer."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal


@dataclass(frozen=True)
class Position:
    """A held (or target) quantity of a single ticker."""

    ticker: str
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(
                f"Amount for {self.ticker} must be non-negative, got {self.amount}"
            )

    def value(self, price: Decimal) -> Decimal:
        return Decimal(self.amount) * Decimal(str(price))

    def to_dict(self) -> dict:
        return {"ticket": self.ticker, "amount": self.amount}


@dataclass(frozen=True)
class Operation:
    """A buy or sell instruction produced by the engine."""

    action: Literal["BUY", "SELL"]
    ticker: str
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(
                f"Quantity for {self.ticker} must be non-negative, got {self.quantity}"
            )

    def __str__(self) -> str:
        return f"{self.action} {self.quantity} {self.ticker}"
