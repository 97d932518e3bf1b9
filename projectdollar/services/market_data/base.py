# projectdollar/services/market_data/base.py
"""
Abstract interface for quote sources.

A quote source answers one question: what is the latest price of a symbol?
The PriceProvider chains several sources (Yahoo Finance first, Alpha Vantage
second by default) and owns the fallthrough between them, so a source only
has to fetch, validate and classify failures.

Failure classification (every source raises one of these):
    TickerNotFoundError       - the source does not know the symbol
    ProviderUnavailableError  - network error, non-2xx, missing API key
    RateLimitError            - retried here with backoff, then propagated
    InvalidQuoteError         - payload unparseable, NaN or non-positive price

The outcome of asking one source is recorded as a QuoteAttempt, tagged with a
QuoteStatus, so callers can see exactly how a price was (or was not) found.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from projectdollar.services.exceptions import InvalidQuoteError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# DATA CLASSES - ATTEMPT RESULTS
# =============================================================================

class QuoteStatus(str, Enum):
    """Outcome of asking a single source for a price."""

    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class QuoteAttempt:
    """
    One step of the fallback chain.

    Attributes:
        source: Name of the source asked (e.g., "yahoo")
        status: How the attempt ended
        price: The price, only when status is OK
        reason: Error text for failed attempts
    """

    source: str
    status: QuoteStatus
    price: Decimal | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == QuoteStatus.OK


@dataclass
class PriceResolution:
    """
    Result of resolving one symbol through the chain.

    Attributes:
        symbol: Normalized symbol
        attempts: Every source asked, in order (empty on a cache hit)
        from_cache: True when the price came from the PriceCache
        cached_price: Price served from the cache, if any
    """

    symbol: str
    attempts: list[QuoteAttempt] = field(default_factory=list)
    from_cache: bool = False
    cached_price: Decimal | None = None

    @property
    def price(self) -> Decimal | None:
        """The resolved price, or None when every source failed."""
        if self.from_cache:
            return self.cached_price
        for attempt in self.attempts:
            if attempt.ok:
                return attempt.price
        return None

    @property
    def source(self) -> str | None:
        """Name of the source that produced the price ("cache" for hits)."""
        if self.from_cache:
            return "cache"
        for attempt in self.attempts:
            if attempt.ok:
                return attempt.source
        return None

    @property
    def found(self) -> bool:
        return self.price is not None


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class QuoteSource(ABC):
    """
    Abstract base class for latest-price sources.

    Retry Behavior:
        `_execute_with_retry` retries RateLimitError with exponential backoff.
        Subclasses can tune it with class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

        Every other failure is returned to the chain immediately so the next
        source gets its turn.
    """

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: float = 1
    RETRY_MAX_WAIT: float = 10
    RETRY_MULTIPLIER: float = 1

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this source.

        Returns:
            Source name (e.g., "yahoo", "alpha_vantage")
        """
        pass

    @abstractmethod
    async def fetch_price(self, symbol: str) -> Decimal:
        """
        Fetch the latest price for a symbol.

        Args:
            symbol: Normalized (stripped, upper-case) ticker

        Returns:
            A positive Decimal price

        Raises:
            TickerNotFoundError, ProviderUnavailableError,
            RateLimitError, InvalidQuoteError
        """
        pass

    def is_enabled(self) -> bool:
        """
        Whether the source should take part in the chain.

        Default implementation returns True. Sources needing credentials
        override it.
        """
        return True

    async def aclose(self) -> None:
        """Release network resources. No-op unless the source holds a client."""

    # =========================================================================
    # RETRY HELPER METHOD
    # =========================================================================

    async def _execute_with_retry(
            self,
            func: Callable[..., Awaitable[T]],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Await `func` and retry it while it raises RateLimitError.

        Raises:
            The last exception if all retries fail
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type(RateLimitError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async def _inner() -> T:
            return await func(*args, **kwargs)

        return await _inner()

    # =========================================================================
    # PRICE VALIDATION
    # =========================================================================

    def _to_price(self, value: Any, symbol: str) -> Decimal:
        """
        Convert a raw price to a positive Decimal.

        Raises:
            InvalidQuoteError: None, unparseable, NaN, zero or negative
        """
        if value is None:
            raise InvalidQuoteError(symbol, self.name, "no price in response")
        try:
            as_float = float(value)
        except (TypeError, ValueError):
            raise InvalidQuoteError(symbol, self.name, f"unparseable price {value!r}")
        if math.isnan(as_float) or math.isinf(as_float):
            raise InvalidQuoteError(symbol, self.name, f"non-finite price {value!r}")
        try:
            price = Decimal(str(value))
        except InvalidOperation:
            raise InvalidQuoteError(symbol, self.name, f"unparseable price {value!r}")
        if price <= 0:
            raise InvalidQuoteError(symbol, self.name, f"non-positive price {price}")
        return price
