"""Configuration constants for the portfolio distributer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MissingPricePolicy(Enum):
    """What the engine does with a ticker that has no usable price."""

    FAIL = "fail"
    SKIP = "skip"


@dataclass(frozen=True)
class BrapiConfig:
    """Configuration for the brapi.dev quote API."""

    BASE_URL: str = "https://brapi.dev"
    REQUEST_TIMEOUT_S: int = 10
    token: Optional[str] = None


@dataclass(frozen=True)
class DistributerConfig:
    """Configuration for a distribution run."""

    RANKING_FILE: str = "ranking.json"
    LOT_SIZE: int = 100
    SNAPSHOT_DIR: str = "."
