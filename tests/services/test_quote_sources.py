# tests/services/test_quote_sources.py
"""
Tests for the concrete quote sources.

Yahoo is tested by patching yfinance.Ticker; Alpha Vantage through an
httpx.MockTransport, so no test touches the network.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import httpx
import pytest

from projectdollar.services.exceptions import (
    InvalidQuoteError,
    ProviderUnavailableError,
    RateLimitError,
    TickerNotFoundError,
)
from projectdollar.services.market_data.alpha_vantage import AlphaVantageQuoteSource
from projectdollar.services.market_data.yahoo import YahooQuoteSource

YF_TICKER = "projectdollar.services.market_data.yahoo.yf.Ticker"


# =============================================================================
# YAHOO
# =============================================================================

@pytest.fixture
def yahoo() -> YahooQuoteSource:
    source = YahooQuoteSource()
    source.RETRY_MIN_WAIT = 0
    source.RETRY_MAX_WAIT = 0
    return source


def _ticker_with_price(price) -> MagicMock:
    ticker = MagicMock()
    ticker.fast_info.last_price = price
    return ticker


class TestYahooQuoteSource:
    """Tests for YahooQuoteSource."""

    def test_name(self, yahoo):
        assert yahoo.name == "yahoo"
        assert yahoo.is_enabled() is True

    @pytest.mark.asyncio
    async def test_fetch_price(self, yahoo):
        with patch(YF_TICKER, return_value=_ticker_with_price(189.2)) as mock_ticker:
            price = await yahoo.fetch_price("AAPL")

        assert price == Decimal("189.2")
        mock_ticker.assert_called_once_with("AAPL")

    @pytest.mark.asyncio
    async def test_missing_price_is_not_found(self, yahoo):
        with patch(YF_TICKER, return_value=_ticker_with_price(None)):
            with pytest.raises(TickerNotFoundError):
                await yahoo.fetch_price("NOPE")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", [float("nan"), 0, -3.5])
    async def test_unusable_price_is_invalid(self, yahoo, bad):
        with patch(YF_TICKER, return_value=_ticker_with_price(bad)):
            with pytest.raises(InvalidQuoteError):
                await yahoo.fetch_price("AAPL")

    @pytest.mark.asyncio
    async def test_generic_error_is_unavailable(self, yahoo):
        with patch(YF_TICKER, side_effect=ConnectionError("connection reset")):
            with pytest.raises(ProviderUnavailableError):
                await yahoo.fetch_price("AAPL")

    @pytest.mark.asyncio
    async def test_rate_limit_retried_then_raised(self, yahoo):
        with patch(YF_TICKER, side_effect=Exception("Too Many Requests. Rate limited")) as mock_ticker:
            with pytest.raises(RateLimitError):
                await yahoo.fetch_price("AAPL")

        assert mock_ticker.call_count == yahoo.MAX_RETRY_ATTEMPTS

    @pytest.mark.asyncio
    async def test_rate_limit_then_success(self, yahoo):
        responses = [Exception("rate limit"), _ticker_with_price(10.5)]

        def _ticker(symbol):
            item = responses.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        with patch(YF_TICKER, side_effect=_ticker):
            assert await yahoo.fetch_price("AAPL") == Decimal("10.5")

    @pytest.mark.asyncio
    async def test_fetch_name_prefers_long_name(self, yahoo):
        ticker = MagicMock()
        ticker.info = {"longName": "Apple Inc.", "shortName": "Apple"}
        with patch(YF_TICKER, return_value=ticker):
            assert await yahoo.fetch_name("AAPL") == "Apple Inc."

    @pytest.mark.asyncio
    async def test_fetch_name_short_name_fallback(self, yahoo):
        ticker = MagicMock()
        ticker.info = {"shortName": "JPMorgan Nasdaq Eq Prem Inc ETF"}
        with patch(YF_TICKER, return_value=ticker):
            assert await yahoo.fetch_name("JEPQ") == "JPMorgan Nasdaq Eq Prem Inc ETF"

    @pytest.mark.asyncio
    async def test_fetch_name_unknown_symbol(self, yahoo):
        with patch(YF_TICKER, side_effect=KeyError("symbol")):
            assert await yahoo.fetch_name("ZZZZ") is None


# =============================================================================
# ALPHA VANTAGE
# =============================================================================

def _alpha_vantage(handler, api_key: str | None = "demo") -> AlphaVantageQuoteSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    source = AlphaVantageQuoteSource(api_key=api_key, client=client)
    source.RETRY_MIN_WAIT = 0
    source.RETRY_MAX_WAIT = 0
    return source


def _json(payload, status_code: int = 200, headers: dict | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload, headers=headers)
    return handler


class TestAlphaVantageQuoteSource:
    """Tests for AlphaVantageQuoteSource."""

    @pytest.mark.asyncio
    async def test_fetch_price(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"Global Quote": {"01. symbol": "JEPQ", "05. price": "52.1300"}})

        source = _alpha_vantage(handler)
        price = await source.fetch_price("JEPQ")

        assert price == Decimal("52.1300")
        params = seen[0].url.params
        assert params["function"] == "GLOBAL_QUOTE"
        assert params["symbol"] == "JEPQ"
        assert params["apikey"] == "demo"

    @pytest.mark.asyncio
    async def test_disabled_without_key(self):
        source = _alpha_vantage(_json({}), api_key=None)

        assert source.is_enabled() is False
        with pytest.raises(ProviderUnavailableError):
            await source.fetch_price("AAPL")

    @pytest.mark.asyncio
    async def test_empty_quote_is_not_found(self):
        source = _alpha_vantage(_json({"Global Quote": {}}))
        with pytest.raises(TickerNotFoundError):
            await source.fetch_price("ZZZZ")

    @pytest.mark.asyncio
    async def test_error_message_is_not_found(self):
        source = _alpha_vantage(_json({"Error Message": "Invalid API call."}))
        with pytest.raises(TickerNotFoundError):
            await source.fetch_price("ZZZZ")

    @pytest.mark.asyncio
    async def test_quota_note_is_rate_limit(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"Note": "Thank you for using Alpha Vantage! 5 calls per minute."})

        source = _alpha_vantage(handler)
        with pytest.raises(RateLimitError):
            await source.fetch_price("AAPL")
        assert len(calls) == source.MAX_RETRY_ATTEMPTS

    @pytest.mark.asyncio
    async def test_http_429_is_rate_limit(self):
        source = _alpha_vantage(_json({}, status_code=429, headers={"Retry-After": "30"}))
        with pytest.raises(RateLimitError) as exc_info:
            await source.fetch_price("AAPL")
        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self):
        source = _alpha_vantage(_json({}, status_code=503))
        with pytest.raises(ProviderUnavailableError):
            await source.fetch_price("AAPL")

    @pytest.mark.asyncio
    async def test_network_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        source = _alpha_vantage(handler)
        with pytest.raises(ProviderUnavailableError):
            await source.fetch_price("AAPL")

    @pytest.mark.asyncio
    async def test_non_json_is_invalid(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>maintenance</html>")

        source = _alpha_vantage(handler)
        with pytest.raises(InvalidQuoteError):
            await source.fetch_price("AAPL")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quote", [
        {"05. price": "0.0000"},
        {"05. price": "n/a"},
        {"01. symbol": "AAPL"},
    ])
    async def test_unusable_price_is_invalid(self, quote):
        source = _alpha_vantage(_json({"Global Quote": quote}))
        with pytest.raises(InvalidQuoteError):
            await source.fetch_price("AAPL")

    @pytest.mark.asyncio
    async def test_missing_global_quote_is_invalid(self):
        source = _alpha_vantage(_json({"Meta": json.dumps({"x": 1})}))
        with pytest.raises(InvalidQuoteError):
            await source.fetch_price("AAPL")
