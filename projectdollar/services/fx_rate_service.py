# projectdollar/services/fx_rate_service.py
"""
Exchange Rate Provider for the live EUR/USD rate.

This service handles:
- Fetching the latest EUR-based rates from a JSON endpoint
- Caching the EUR→USD rate for a configurable TTL (1 hour by default)
- Falling back to a constant rate when the source fails

=============================================================================
RATE CONVENTION (IMPORTANT!)
=============================================================================

    rate = "1 EUR = X USD"

Example:
    rate = 1.10

    Meaning: 1 EUR = 1.10 USD

Conversion formula (projectdollar.utils.fx_conversion):
    To convert USD → EUR:  EUR_amount = USD_amount ÷ rate
    To convert EUR → USD:  USD_amount = EUR_amount × rate

=============================================================================
FAILURE POLICY
=============================================================================

get_rate() never raises and never returns None. Network errors, non-2xx
responses, a missing `rates.USD` field and non-numeric, NaN or non-positive
values all produce the fallback rate. The fallback is NOT cached, so the next
call tries the source again.

Source response (exchangerate-api.com v4):
    {"base": "EUR", "date": "2024-05-02", "rates": {"USD": 1.0712, ...}}

Usage:
    from projectdollar.services import ExchangeRateProvider

    provider = ExchangeRateProvider(url=settings.fx_rate_url)
    rate = await provider.get_rate()            # Decimal("1.0712")
    eur = await provider.usd_to_eur(Decimal("1200"))
"""

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Literal

import httpx

from projectdollar.services.constants import (
    DEFAULT_FALLBACK_EUR_USD_RATE,
    DEFAULT_FX_CACHE_TTL_SECONDS,
)
from projectdollar.services.exceptions import FXProviderError
from projectdollar.utils import fx_conversion

logger = logging.getLogger(__name__)

DEFAULT_FX_RATE_URL = "https://api.exchangerate-api.com/v4/latest/EUR"

RateSource = Literal["live", "cache", "fallback"]


# =============================================================================
# RESULT DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class ExchangeRate:
    """
    EUR/USD rate with provenance.

    Attributes:
        rate: 1 EUR = rate USD
        fetched_at: When the rate was obtained (UTC)
        source: "live" (just fetched), "cache" or "fallback" (constant)
    """

    rate: Decimal
    fetched_at: datetime
    source: RateSource

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


@dataclass(frozen=True)
class _CachedRate:
    rate: Decimal
    fetched_at: datetime
    stored_at: float


# =============================================================================
# SERVICE
# =============================================================================

class ExchangeRateProvider:
    """
    Cached EUR/USD rate with a constant fallback.

    Args:
        url: JSON endpoint returning rates relative to EUR
        cache_ttl: Seconds a fetched rate stays valid
        fallback_rate: Rate served when the source fails
        timeout: HTTP timeout in seconds
        client: Shared httpx.AsyncClient (tests pass one with a MockTransport)
        clock: Monotonic clock for cache expiry (tests pass a fake)
    """

    def __init__(
            self,
            url: str = DEFAULT_FX_RATE_URL,
            cache_ttl: float = DEFAULT_FX_CACHE_TTL_SECONDS,
            fallback_rate: Decimal = DEFAULT_FALLBACK_EUR_USD_RATE,
            timeout: float = 5.0,
            client: httpx.AsyncClient | None = None,
            clock: Callable[[], float] | None = None,
    ) -> None:
        if fallback_rate <= 0:
            raise ValueError(f"fallback_rate must be positive, got {fallback_rate}")
        self._url = url
        self._cache_ttl = cache_ttl
        self._fallback_rate = Decimal(fallback_rate)
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._clock = clock or time.monotonic
        self._cached: _CachedRate | None = None
        logger.info(
            f"ExchangeRateProvider initialized (ttl={cache_ttl}s, fallback={fallback_rate})"
        )

    @property
    def fallback_rate(self) -> Decimal:
        return self._fallback_rate

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def get_rate(self) -> Decimal:
        """Current EUR→USD rate (1 EUR = X USD). Never raises."""
        info = await self.get_rate_info()
        return info.rate

    async def get_rate_info(self) -> ExchangeRate:
        """
        Current rate with its provenance.

        Returns:
            ExchangeRate tagged "cache", "live" or "fallback"
        """
        cached = self._cached
        if cached is not None and self._clock() - cached.stored_at < self._cache_ttl:
            return ExchangeRate(rate=cached.rate, fetched_at=cached.fetched_at, source="cache")

        try:
            rate = await self._fetch_rate()
        except FXProviderError as e:
            logger.warning(f"{e}; using fallback rate {self._fallback_rate}")
            return ExchangeRate(
                rate=self._fallback_rate,
                fetched_at=datetime.now(timezone.utc),
                source="fallback",
            )

        fetched_at = datetime.now(timezone.utc)
        self._cached = _CachedRate(rate=rate, fetched_at=fetched_at, stored_at=self._clock())
        logger.info(f"EUR/USD rate updated: {rate}")
        return ExchangeRate(rate=rate, fetched_at=fetched_at, source="live")

    def invalidate(self) -> None:
        """Drop the cached rate so the next call fetches."""
        self._cached = None

    async def usd_to_eur(self, amount: Decimal) -> Decimal:
        """Convert USD to EUR at the current rate."""
        return fx_conversion.usd_to_eur(amount, await self.get_rate())

    async def eur_to_usd(self, amount: Decimal) -> Decimal:
        """Convert EUR to USD at the current rate."""
        return fx_conversion.eur_to_usd(amount, await self.get_rate())

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _fetch_rate(self) -> Decimal:
        """
        Fetch and validate rates.USD.

        Raises:
            FXProviderError: For every failure mode
        """
        try:
            response = await self._get_client().get(self._url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise FXProviderError(self._url, f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise FXProviderError(self._url, str(e) or type(e).__name__)
        except ValueError:
            raise FXProviderError(self._url, "response is not JSON")

        return self._parse_rate(payload)

    def _parse_rate(self, payload: Any) -> Decimal:
        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict) or "USD" not in rates:
            raise FXProviderError(self._url, "response has no rates.USD")

        raw = rates["USD"]
        if isinstance(raw, bool):
            raise FXProviderError(self._url, f"non-numeric rate {raw!r}")
        try:
            as_float = float(raw)
            rate = Decimal(str(raw))
        except (TypeError, ValueError, InvalidOperation):
            raise FXProviderError(self._url, f"non-numeric rate {raw!r}")

        if math.isnan(as_float) or math.isinf(as_float) or rate <= 0:
            raise FXProviderError(self._url, f"unusable rate {raw!r}")
        return rate
