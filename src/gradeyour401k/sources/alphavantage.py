"""Alpha Vantage daily price client."""
from __future__ import annotations

import logging

import requests

from ..metrics import Bar
from .utils import parse_date, parse_float

LOGGER = logging.getLogger(__name__)


class MarketDataError(RuntimeError):
    """Raised when the vendor answers without a usable price series."""


class AlphaVantageClient:
    """Fetches adjusted daily closes for a ticker."""

    BASE_URL = "https://www.alphavantage.co/query"
    SERIES_KEY = "Time Series (Daily)"

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        timeout: float = 30,
        outputsize: str = "full",
    ) -> None:
        if not api_key:
            raise RuntimeError("GY4K_ALPHA_VANTAGE_API_KEY must be set to fetch prices")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.outputsize = outputsize

    def fetch_daily_closes(self, symbol: str) -> list[Bar]:
        """Return ascending daily bars, preferring the adjusted close."""

        LOGGER.debug("Requesting daily series for %s", symbol)
        response = self.session.get(
            self.BASE_URL,
            params={
                "function": "TIME_SERIES_DAILY_ADJUSTED",
                "symbol": symbol,
                "outputsize": self.outputsize,
                "apikey": self.api_key,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()

        series = payload.get(self.SERIES_KEY)
        if not series:
            reason = (
                payload.get("Error Message")
                or payload.get("Note")
                or payload.get("Information")
                or "no series in response"
            )
            raise MarketDataError(f"{symbol}: {reason}")

        bars: list[Bar] = []
        for day, values in series.items():
            close = parse_float(values.get("5. adjusted close"))
            if close is None:
                close = parse_float(values.get("4. close"))
            parsed = parse_date(day)
            if parsed is None or close is None:
                continue
            bars.append(Bar(day=parsed, close=close))
        bars.sort(key=lambda bar: bar.day)
        LOGGER.debug("Parsed %d bars for %s", len(bars), symbol)
        return bars


__all__ = ["AlphaVantageClient", "MarketDataError"]
