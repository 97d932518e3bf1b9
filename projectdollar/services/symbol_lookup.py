# projectdollar/services/symbol_lookup.py
"""
Company name lookup for the "add holding" form.

Order:
    1. Yahoo Finance metadata (longName, else shortName)
    2. Built-in table of well-known tickers
    3. Nothing → [] (the user can still save the holding without a name)

A lookup never raises for provider trouble; it only gets less helpful.
"""

import asyncio
import logging
from dataclasses import dataclass

from projectdollar.services.exceptions import MarketDataError
from projectdollar.services.market_data.price_cache import normalize_symbol
from projectdollar.services.market_data.yahoo import YahooQuoteSource

logger = logging.getLogger(__name__)

KNOWN_SYMBOLS: dict[str, str] = {
    "JEPQ": "JPMorgan Equity Premium Income ETF",
    "JEPG": "JPMorgan Equity Premium Income ETF - Global",
    "JEPI": "JPMorgan Equity Premium Income ETF",
    "JEPX": "JPMorgan Equity Premium Income ETF eXtra",
    "AAPL": "Apple Inc.",
    "MSFT": "Microsoft Corporation",
    "GOOGL": "Alphabet Inc.",
    "AMZN": "Amazon.com Inc.",
    "TSLA": "Tesla Inc.",
    "META": "Meta Platforms Inc.",
    "NFLX": "Netflix Inc.",
    "JPM": "JPMorgan Chase & Co.",
    "XOM": "Exxon Mobil Corporation",
    "JNJ": "Johnson & Johnson",
}


@dataclass(frozen=True)
class SymbolMatch:
    """A symbol with its display name and where the name came from."""

    symbol: str
    name: str
    source: str


class SymbolLookupService:
    """
    Resolves a ticker to a display name.

    Args:
        yahoo: Yahoo source used for metadata; None skips the online step
        known_symbols: Offline table used when Yahoo has no answer
        timeout: Seconds allowed for the Yahoo request
    """

    def __init__(
            self,
            yahoo: YahooQuoteSource | None = None,
            known_symbols: dict[str, str] | None = None,
            timeout: float = 5.0,
    ) -> None:
        self._yahoo = yahoo
        self._known = KNOWN_SYMBOLS if known_symbols is None else known_symbols
        self._timeout = timeout

    async def lookup(self, keyword: str) -> list[SymbolMatch]:
        """
        Find the display name for a ticker.

        Returns:
            A single-element list on success, [] when nothing matched
        """
        symbol = normalize_symbol(keyword)
        if not symbol:
            return []

        if self._yahoo is not None:
            name = await self._lookup_online(symbol)
            if name:
                return [SymbolMatch(symbol=symbol, name=name, source=self._yahoo.name)]

        known = self._known.get(symbol)
        if known:
            return [SymbolMatch(symbol=symbol, name=known, source="builtin")]

        logger.info(f"No name found for symbol {symbol}")
        return []

    async def _lookup_online(self, symbol: str) -> str | None:
        try:
            return await asyncio.wait_for(self._yahoo.fetch_name(symbol), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Name lookup for {symbol} timed out after {self._timeout}s")
        except MarketDataError as e:
            logger.warning(f"Name lookup for {symbol} failed: {e}")
        return None
