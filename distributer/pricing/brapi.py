"""Price source backed by the brapi.dev quote API."""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..config import BrapiConfig
from ..exceptions import PriceSourceError
from .base import PriceSource

logger = logging.getLogger(__name__)


class BrapiPriceSource(PriceSource):
    """Fetch regular market prices for B3 tickers from brapi.dev."""

    def __init__(self, config: Optional[BrapiConfig] = None) -> None:
        self.config = config or BrapiConfig()

    def quote_url(self, tickers: list[str]) -> str:
        url = f"{self.config.BASE_URL}/api/quote/{quote(','.join(tickers), safe=',')}"
        if self.config.token:
            url += "?" + urlencode({"token": self.config.token})
        return url

    def fetch(self, tickers: Iterable[str]) -> dict[str, Decimal]:
        tickers = list(dict.fromkeys(tickers))
        if not tickers:
            return {}

        req = Request(self.quote_url(tickers), headers={"User-Agent": "Mozilla/5.0"})
        try:
            with urlopen(req, timeout=self.config.REQUEST_TIMEOUT_S) as resp:
                body = json.loads(resp.read())
        except (OSError, ValueError) as e:
            raise PriceSourceError(f"Failed to fetch prices from brapi: {e}") from e

        prices = self._parse_results(body)

        for ticker in tickers:
            if ticker not in prices:
                logger.warning("%s does not have a price", ticker)

        return prices

    def _parse_results(self, body) -> dict[str, Decimal]:
        if not isinstance(body, dict) or not isinstance(body.get("results"), list):
            raise PriceSourceError("Unexpected brapi response: missing results")

        prices: dict[str, Decimal] = {}
        for result in body["results"]:
            if not isinstance(result, dict):
                continue
            symbol = result.get("symbol")
            price = result.get("regularMarketPrice")
            if not symbol or price is None:
                continue
            try:
                prices[symbol] = Decimal(str(price))
            except InvalidOperation:
                logger.warning("Ignoring unparseable price for %s: %r", symbol, price)

        return prices
