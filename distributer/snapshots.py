"""Loading and saving ranking and portfolio snapshots."""

import calendar
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, Optional

from .exceptions import SnapshotError
from .models import Position


def snapshot_name(year: int, month: int) -> str:
    """File name for a monthly snapshot, e.g. "2026-october.json"."""
    return f"{year}-{calendar.month_name[month].lower()}.json"


def current_snapshot_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return snapshot_name(today.year, today.month)


def previous_snapshot_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    if today.month == 1:
        return snapshot_name(today.year - 1, 12)
    return snapshot_name(today.year, today.month - 1)


def _read_json(path: str | Path):
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"{path} is not valid JSON: {e}") from e
    except OSError as e:
        raise SnapshotError(f"Cannot read {path}: {e}") from e


def load_ranking(path: str | Path) -> list[str]:
    """Load the priority-ordered ticker ranking.

    Args:
        path: JSON file holding an array of ticker strings.

    Returns:
        Tickers in priority order.

    Raises:
        SnapshotError: If the file is missing, malformed, empty or repeats a ticker.
    """
    data = _read_json(path)

    if not isinstance(data, list) or not all(isinstance(t, str) for t in data):
        raise SnapshotError(f"{path} must contain a JSON array of tickers")
    if not data:
        raise SnapshotError(f"{path} does not rank any ticker")
    if len(set(data)) != len(data):
        raise SnapshotError(f"{path} ranks the same ticker more than once")

    return data


def _parse_amount(raw, ticker: str) -> int:
    if isinstance(raw, bool):
        raise SnapshotError(f"Amount for {ticker} must be a number, got {raw!r}")
    try:
        amount = Decimal(str(raw))
    except InvalidOperation:
        raise SnapshotError(f"Amount for {ticker} must be a number, got {raw!r}")

    if not amount.is_finite() or amount != amount.to_integral_value() or amount < 0:
        raise SnapshotError(
            f"Amount for {ticker} must be a whole non-negative number, got {raw!r}"
        )
    return int(amount)


def load_portfolio(path: str | Path) -> list[Position]:
    """Load a portfolio snapshot.

    Each record is ``{"ticket": "PETR4", "amount": 100}``; ``ticker`` is
    accepted in place of ``ticket``.

    Raises:
        SnapshotError: If the file is missing or any record is malformed.
    """
    data = _read_json(path)

    if not isinstance(data, list):
        raise SnapshotError(f"{path} must contain a JSON array of positions")

    positions: list[Position] = []
    seen: set[str] = set()

    for record in data:
        if not isinstance(record, dict):
            raise SnapshotError(f"Invalid position record in {path}: {record!r}")

        ticker = record.get("ticket", record.get("ticker"))
        if not isinstance(ticker, str) or not ticker:
            raise SnapshotError(f"Position without ticker in {path}: {record!r}")
        if ticker in seen:
            raise SnapshotError(f"{ticker} appears more than once in {path}")
        seen.add(ticker)

        positions.append(Position(ticker, _parse_amount(record.get("amount"), ticker)))

    return positions


def save_portfolio(path: str | Path, positions: Iterable[Position]) -> Path:
    """Write the portfolio as an indented JSON array and return its path."""
    path = Path(path)
    encoded = json.dumps([p.to_dict() for p in positions], indent=2)
    path.write_text(encoded + "\n", encoding="utf-8")
    return path
