# projectdollar/services/market_data/price_cache.py
"""
In-memory cache of the latest price per symbol.

One instance lives for the whole process and is injected into the
PriceProvider (see dependencies.get_price_cache). Entries expire by age only;
readers pick their own freshness through `max_age`, so the valuation path can
demand a 5 minute quote while the background refresh accepts a 10 minute one.

Timestamps come from a monotonic clock. Tests pass their own clock to step
time forward without sleeping.
"""

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from projectdollar.services.constants import DEFAULT_PRICE_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """
    A cached price.

    Attributes:
        symbol: Normalized ticker
        price: Last known price
        fetched_at: Clock reading when the price was stored
    """

    symbol: str
    price: Decimal
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


def normalize_symbol(symbol: str | None) -> str:
    """Strip and upper-case a ticker; None becomes an empty string."""
    return (symbol or "").strip().upper()


class PriceCache:
    """
    Symbol → PriceQuote map with age-based expiry.

    Example:
        cache = PriceCache(ttl_seconds=300)
        cache.put("aapl", Decimal("189.20"))
        cache.get("AAPL")               # Decimal("189.20")
        cache.get("AAPL", max_age=0)    # None
    """

    def __init__(
            self,
            ttl_seconds: float = DEFAULT_PRICE_TTL_SECONDS,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, PriceQuote] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, symbol: str, max_age: float | None = None) -> Decimal | None:
        """
        Return the cached price if it is younger than `max_age` seconds.

        Args:
            symbol: Ticker (any case)
            max_age: Freshness limit; defaults to the cache TTL

        Returns:
            The price, or None when missing or too old
        """
        quote = self.get_quote(symbol, max_age)
        return quote.price if quote else None

    def get_quote(self, symbol: str, max_age: float | None = None) -> PriceQuote | None:
        """Like get(), but returns the full PriceQuote."""
        key = normalize_symbol(symbol)
        quote = self._entries.get(key)
        if quote is None:
            return None

        limit = self._ttl if max_age is None else max_age
        if quote.age(self._clock()) >= limit:
            return None
        return quote

    def put(self, symbol: str, price: Decimal) -> PriceQuote:
        """Store a price, replacing any previous entry for the symbol."""
        key = normalize_symbol(symbol)
        quote = PriceQuote(symbol=key, price=price, fetched_at=self._clock())
        self._entries[key] = quote
        logger.debug(f"Cached price for {key}: {price}")
        return quote

    def invalidate(self, symbol: str) -> None:
        """Drop one symbol."""
        self._entries.pop(normalize_symbol(symbol), None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries = {}

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for quote in self._entries.values() if quote.age(now) < self._ttl)

    def __contains__(self, symbol: object) -> bool:
        if not isinstance(symbol, str):
            return False
        return self.get_quote(symbol) is not None
