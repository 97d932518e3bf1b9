# projectdollar/services/market_data/price_provider.py
"""
Price provider: cache + ordered fallback chain of quote sources.

Resolution order for one symbol:
    1. PriceCache (fresh within max_age) → done, no network
    2. Each enabled QuoteSource in order, each bounded by `timeout`
    3. First OK price is cached and returned
    4. Nothing found → None (the valuation falls back to purchase price)

Provider failures never escape this module. Every attempt is recorded as a
QuoteAttempt so the fallthrough is explicit and inspectable.

Batch and sequential fetching:
    fetch_prices()            - concurrent, capped by a semaphore
    fetch_prices_sequential() - one at a time with a pause between network
                                lookups, used by the background refresh to
                                stay under free-tier rate limits

Both return only the symbols that resolved; a failed symbol is absent from
the map, never present with None or zero.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Awaitable, Callable, Iterable, Sequence

from projectdollar.services.constants import (
    DEFAULT_FETCH_CONCURRENCY,
    DEFAULT_PRICE_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_DELAY_SECONDS,
    PLACEHOLDER_SYMBOLS,
)
from projectdollar.services.exceptions import (
    InvalidQuoteError,
    MarketDataError,
    RateLimitError,
    TickerNotFoundError,
)
from projectdollar.services.market_data.base import (
    PriceResolution,
    QuoteAttempt,
    QuoteSource,
    QuoteStatus,
)
from projectdollar.services.market_data.price_cache import PriceCache, normalize_symbol

logger = logging.getLogger(__name__)


class PriceProvider:
    """
    Resolves latest prices through the cache and the quote source chain.

    Args:
        sources: Ordered quote sources; the first is the primary
        cache: Shared PriceCache instance
        timeout: Seconds allowed per source attempt
        max_concurrency: Cap on simultaneous lookups in fetch_prices()
        request_delay: Default pause for fetch_prices_sequential()
        sleep: Awaitable sleep function (tests pass a recorder)

    Example:
        provider = PriceProvider([YahooQuoteSource()], PriceCache())
        prices = await provider.fetch_prices(["AAPL", "MSFT"])
    """

    def __init__(
            self,
            sources: Sequence[QuoteSource],
            cache: PriceCache,
            timeout: float = DEFAULT_PRICE_TIMEOUT_SECONDS,
            max_concurrency: int = DEFAULT_FETCH_CONCURRENCY,
            request_delay: float = DEFAULT_REQUEST_DELAY_SECONDS,
            sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self._sources = list(sources)
        self._cache = cache
        self._timeout = timeout
        self._max_concurrency = max_concurrency
        self._request_delay = request_delay
        self._sleep = sleep
        logger.info(
            f"PriceProvider initialized (sources={[s.name for s in self._sources]}, "
            f"timeout={timeout}s, max_concurrency={max_concurrency})"
        )

    @property
    def cache(self) -> PriceCache:
        return self._cache

    @property
    def source_names(self) -> list[str]:
        return [source.name for source in self._sources]

    # =========================================================================
    # SINGLE SYMBOL
    # =========================================================================

    async def resolve(self, symbol: str, max_age: float | None = None) -> PriceResolution:
        """
        Resolve one symbol and report every attempt made.

        Args:
            symbol: Ticker (any case, surrounding whitespace ignored)
            max_age: Cache freshness limit in seconds (default: cache TTL)

        Returns:
            PriceResolution; `.price` is None when nothing was found
        """
        key = normalize_symbol(symbol)
        resolution = PriceResolution(symbol=key)

        if key in PLACEHOLDER_SYMBOLS:
            return resolution

        cached = self._cache.get(key, max_age=max_age)
        if cached is not None:
            logger.debug(f"Price cache hit for {key}")
            resolution.from_cache = True
            resolution.cached_price = cached
            return resolution

        for source in self._sources:
            if not source.is_enabled():
                continue
            attempt = await self._attempt(source, key)
            resolution.attempts.append(attempt)
            if attempt.ok:
                self._cache.put(key, attempt.price)
                if len(resolution.attempts) > 1:
                    logger.info(f"Price for {key} served by fallback source '{source.name}'")
                return resolution

        if resolution.attempts:
            summary = ", ".join(f"{a.source}={a.status.value}" for a in resolution.attempts)
            logger.warning(f"No price for {key} from any source ({summary})")
        else:
            logger.warning(f"No price for {key}: no quote source enabled")
        return resolution

    async def _attempt(self, source: QuoteSource, symbol: str) -> QuoteAttempt:
        """Ask one source, converting its failure into a tagged attempt."""
        try:
            price = await asyncio.wait_for(source.fetch_price(symbol), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{source.name} timed out after {self._timeout}s for {symbol}")
            return QuoteAttempt(source.name, QuoteStatus.TIMEOUT, reason=f"timeout after {self._timeout}s")
        except TickerNotFoundError as e:
            logger.info(f"{source.name}: {e}")
            return QuoteAttempt(source.name, QuoteStatus.NOT_FOUND, reason=str(e))
        except InvalidQuoteError as e:
            logger.warning(f"{source.name}: {e}")
            return QuoteAttempt(source.name, QuoteStatus.INVALID, reason=str(e))
        except RateLimitError as e:
            logger.warning(f"{source.name}: {e}")
            return QuoteAttempt(source.name, QuoteStatus.RATE_LIMITED, reason=str(e))
        except MarketDataError as e:
            logger.warning(f"{source.name}: {e}")
            return QuoteAttempt(source.name, QuoteStatus.UNAVAILABLE, reason=str(e))
        except Exception as e:
            logger.warning(f"{source.name} failed unexpectedly for {symbol}: {e}")
            return QuoteAttempt(source.name, QuoteStatus.UNAVAILABLE, reason=str(e))

        return QuoteAttempt(source.name, QuoteStatus.OK, price=price)

    async def fetch_price(self, symbol: str, max_age: float | None = None) -> Decimal | None:
        """Latest price for one symbol, or None when no source has it."""
        resolution = await self.resolve(symbol, max_age=max_age)
        return resolution.price

    # =========================================================================
    # BATCH
    # =========================================================================

    async def fetch_prices(
            self,
            symbols: Iterable[str],
            max_age: float | None = None,
    ) -> dict[str, Decimal]:
        """
        Fetch many symbols concurrently.

        Duplicates (after normalization) are looked up once. At most
        `max_concurrency` lookups run at the same time.

        Returns:
            Map of normalized symbol → price, successes only
        """
        unique = self._unique_symbols(symbols)
        if not unique:
            return {}

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(sym: str) -> PriceResolution:
            async with semaphore:
                return await self.resolve(sym, max_age=max_age)

        resolutions = await asyncio.gather(*(_bounded(sym) for sym in unique))
        prices = {r.symbol: r.price for r in resolutions if r.price is not None}

        if len(prices) < len(unique):
            missing = [sym for sym in unique if sym not in prices]
            logger.info(f"Batch fetch: {len(prices)}/{len(unique)} prices, missing {missing}")
        return prices

    async def fetch_prices_sequential(
            self,
            symbols: Iterable[str],
            delay: float | None = None,
            max_age: float | None = None,
    ) -> dict[str, Decimal]:
        """
        Fetch symbols one after another, pausing `delay` seconds between
        network lookups. Cache hits are served without pausing.

        Returns:
            Map of normalized symbol → price, successes only
        """
        pause = self._request_delay if delay is None else delay
        prices: dict[str, Decimal] = {}
        looked_up_before = False

        for sym in self._unique_symbols(symbols):
            cached = self._cache.get(sym, max_age=max_age)
            if cached is not None:
                prices[sym] = cached
                continue

            if looked_up_before and pause > 0:
                await self._sleep(pause)
            looked_up_before = True

            price = await self.fetch_price(sym, max_age=max_age)
            if price is not None:
                prices[sym] = price

        return prices

    def clear_cache(self) -> None:
        """Forget every cached price."""
        self._cache.clear()
        logger.info("Price cache cleared")

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    @staticmethod
    def _unique_symbols(symbols: Iterable[str]) -> list[str]:
        """Normalize, drop placeholders, de-duplicate keeping first order."""
        seen: dict[str, None] = {}
        for symbol in symbols:
            key = normalize_symbol(symbol)
            if key in PLACEHOLDER_SYMBOLS:
                continue
            seen.setdefault(key, None)
        return list(seen)
