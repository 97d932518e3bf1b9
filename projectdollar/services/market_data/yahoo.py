# projectdollar/services/market_data/yahoo.py
"""
Yahoo Finance quote source.

Uses the yfinance library, which is synchronous; every call is pushed to a
worker thread with asyncio.to_thread so the event loop keeps serving while
Yahoo answers.

Limitations:
- Rate limits (not officially documented, but exist)
- Quotes may be delayed (15-20 minutes for some markets)
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any

import yfinance as yf

from projectdollar.services.exceptions import (
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    InvalidQuoteError,
)
from projectdollar.services.market_data.base import QuoteSource

logger = logging.getLogger(__name__)


class YahooQuoteSource(QuoteSource):
    """
    Primary quote source backed by yfinance.

    Price: `Ticker(symbol).fast_info.last_price`
    Name:  `Ticker(symbol).info["longName"]` or `["shortName"]`

    Example:
        source = YahooQuoteSource()
        price = await source.fetch_price("AAPL")
    """

    def __init__(self) -> None:
        logger.info("YahooQuoteSource initialized")

    @property
    def name(self) -> str:
        return "yahoo"

    # =========================================================================
    # PRICE
    # =========================================================================

    async def fetch_price(self, symbol: str) -> Decimal:
        """
        Fetch the last traded price.

        Raises:
            TickerNotFoundError: Yahoo has no price for the symbol
            RateLimitError: Still rate limited after retries
            ProviderUnavailableError: Any other yfinance failure
            InvalidQuoteError: NaN or non-positive price
        """
        return await self._execute_with_retry(self._fetch_price, symbol)

    async def _fetch_price(self, symbol: str) -> Decimal:
        """Internal method called by the retry wrapper."""
        raw = await asyncio.to_thread(self._read_last_price, symbol)
        return self._to_price(raw, symbol)

    def _read_last_price(self, symbol: str) -> Any:
        """Blocking yfinance call; runs in a worker thread."""
        logger.debug(f"Fetching last price for {symbol}")
        try:
            last_price = yf.Ticker(symbol).fast_info.last_price
        except Exception as e:
            raise self._classify_error(symbol, e) from e

        if last_price is None:
            raise TickerNotFoundError(ticker=symbol, provider=self.name)
        return last_price

    # =========================================================================
    # METADATA
    # =========================================================================

    async def fetch_name(self, symbol: str) -> str | None:
        """
        Fetch the display name for a symbol.

        Returns:
            longName, else shortName, else None when Yahoo has neither

        Raises:
            RateLimitError, ProviderUnavailableError
        """
        info = await asyncio.to_thread(self._read_info, symbol)
        if not info:
            return None
        return info.get("longName") or info.get("shortName") or None

    def _read_info(self, symbol: str) -> dict | None:
        try:
            return yf.Ticker(symbol).info
        except Exception as e:
            error = self._classify_error(symbol, e)
            if isinstance(error, TickerNotFoundError):
                return None
            raise error from e

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _classify_error(self, symbol: str, error: Exception) -> Exception:
        """Map a yfinance exception to the source failure taxonomy."""
        if isinstance(error, (TickerNotFoundError, InvalidQuoteError)):
            return error

        error_str = str(error).lower()
        if "rate limit" in error_str or "too many requests" in error_str:
            return RateLimitError(provider=self.name)
        if (
                isinstance(error, KeyError)
                or "not found" in error_str
                or "no data" in error_str
                or "delisted" in error_str
        ):
            return TickerNotFoundError(ticker=symbol, provider=self.name)

        logger.warning(f"Yahoo Finance error for {symbol}: {error}")
        return ProviderUnavailableError(provider=self.name, reason=str(error))
