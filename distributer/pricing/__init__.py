"""Price sources for the distributer."""

from .base import PriceSource
from .brapi import BrapiPriceSource

__all__ = ["PriceSource", "BrapiPriceSource"]
