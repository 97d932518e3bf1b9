# projectdollar/services/market_data/alpha_vantage.py
"""
Alpha Vantage quote source (GLOBAL_QUOTE endpoint).

Request:
    GET https://www.alphavantage.co/query
        ?function=GLOBAL_QUOTE&symbol=AAPL&apikey=...

Response:
    {"Global Quote": {"01. symbol": "AAPL", "05. price": "189.2000", ...}}

The free tier answers HTTP 200 with a "Note" or "Information" message when
the quota is used up, so the body is inspected as well as the status code.
"""

import logging
from decimal import Decimal
from typing import Any

import httpx

from projectdollar.services.exceptions import (
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    InvalidQuoteError,
)
from projectdollar.services.market_data.base import QuoteSource

logger = logging.getLogger(__name__)

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"

# Body keys Alpha Vantage uses for quota messages
RATE_LIMIT_KEYS = ("Note", "Information")


class AlphaVantageQuoteSource(QuoteSource):
    """
    Secondary quote source backed by the Alpha Vantage REST API.

    Disabled (is_enabled() is False) when no API key is configured; the
    PriceProvider skips disabled sources.

    Args:
        api_key: Alpha Vantage API key
        timeout: HTTP timeout in seconds
        client: Shared httpx.AsyncClient (tests pass one with a MockTransport)
        base_url: Endpoint override
    """

    def __init__(
            self,
            api_key: str | None,
            timeout: float = 5.0,
            client: httpx.AsyncClient | None = None,
            base_url: str = ALPHA_VANTAGE_URL,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._base_url = base_url
        logger.info(
            f"AlphaVantageQuoteSource initialized (enabled={self.is_enabled()}, timeout={timeout}s)"
        )

    @property
    def name(self) -> str:
        return "alpha_vantage"

    def is_enabled(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # =========================================================================
    # PRICE
    # =========================================================================

    async def fetch_price(self, symbol: str) -> Decimal:
        """
        Fetch the latest price from GLOBAL_QUOTE.

        Raises:
            ProviderUnavailableError: No API key, network error or non-2xx
            RateLimitError: HTTP 429 or quota message, after retries
            TickerNotFoundError: Empty "Global Quote" object
            InvalidQuoteError: Missing, unparseable or non-positive price
        """
        if not self.is_enabled():
            raise ProviderUnavailableError(provider=self.name, reason="API key not configured")
        return await self._execute_with_retry(self._fetch_price, symbol)

    async def _fetch_price(self, symbol: str) -> Decimal:
        """Internal method called by the retry wrapper."""
        payload = await self._request(symbol)

        if any(key in payload for key in RATE_LIMIT_KEYS):
            raise RateLimitError(provider=self.name)

        if "Error Message" in payload:
            raise TickerNotFoundError(ticker=symbol, provider=self.name)

        quote = payload.get("Global Quote")
        if quote is None:
            raise InvalidQuoteError(symbol, self.name, "response has no 'Global Quote'")
        if not quote:
            raise TickerNotFoundError(ticker=symbol, provider=self.name)

        return self._to_price(quote.get("05. price"), symbol)

    async def _request(self, symbol: str) -> dict[str, Any]:
        params = {"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self._api_key}
        logger.debug(f"Requesting Alpha Vantage quote for {symbol}")

        try:
            response = await self._get_client().get(self._base_url, params=params)
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(provider=self.name, reason=str(e) or type(e).__name__)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                provider=self.name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code >= 400:
            raise ProviderUnavailableError(
                provider=self.name, reason=f"HTTP {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError:
            raise InvalidQuoteError(symbol, self.name, "response is not JSON")
        if not isinstance(payload, dict):
            raise InvalidQuoteError(symbol, self.name, "response is not a JSON object")
        return payload
