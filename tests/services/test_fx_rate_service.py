# tests/services/test_fx_rate_service.py
"""
Tests for the ExchangeRateProvider.

This module tests:
- Live fetch and parsing of rates.USD
- Cache TTL (no refetch within the hour)
- Fallback on every failure mode, never cached
- Conversion helpers at the current rate
"""

from decimal import Decimal

import httpx
import pytest

from projectdollar.services.fx_rate_service import ExchangeRateProvider
from tests.conftest import FakeClock

RATE_URL = "https://rates.test/v4/latest/EUR"


# =============================================================================
# FIXTURES
# =============================================================================

class RateServer:
    """MockTransport handler with a swappable response."""

    def __init__(self, payload=None, status_code: int = 200):
        self.payload = payload if payload is not None else {"base": "EUR", "rates": {"USD": 1.0712}}
        self.status_code = status_code
        self.error: Exception | None = None
        self.requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, bytes):
            return httpx.Response(self.status_code, content=self.payload)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def server() -> RateServer:
    return RateServer()


@pytest.fixture
def fx_provider(server, clock) -> ExchangeRateProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(server))
    return ExchangeRateProvider(
        url=RATE_URL,
        cache_ttl=3600,
        fallback_rate=Decimal("1.08"),
        client=client,
        clock=clock,
    )


# =============================================================================
# LIVE RATE AND CACHE
# =============================================================================

class TestGetRate:
    """Tests for fetching and caching."""

    @pytest.mark.asyncio
    async def test_live_rate(self, fx_provider, server):
        info = await fx_provider.get_rate_info()

        assert info.rate == Decimal("1.0712")
        assert info.source == "live"
        assert info.is_fallback is False
        assert server.requests == 1

    @pytest.mark.asyncio
    async def test_cached_within_ttl(self, fx_provider, server, clock):
        await fx_provider.get_rate()
        clock.advance(3599)

        info = await fx_provider.get_rate_info()

        assert info.source == "cache"
        assert info.rate == Decimal("1.0712")
        assert server.requests == 1

    @pytest.mark.asyncio
    async def test_refetched_after_ttl(self, fx_provider, server, clock):
        await fx_provider.get_rate()
        server.payload = {"rates": {"USD": "1.0900"}}
        clock.advance(3600)

        assert await fx_provider.get_rate() == Decimal("1.0900")
        assert server.requests == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_fetch(self, fx_provider, server):
        await fx_provider.get_rate()
        fx_provider.invalidate()
        await fx_provider.get_rate()

        assert server.requests == 2


# =============================================================================
# FALLBACK
# =============================================================================

class TestFallback:
    """Every failure yields the fallback rate; get_rate never raises."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"rates": {}},
        {"rates": {"USD": None}},
        {"rates": {"USD": "abc"}},
        {"rates": {"USD": 0}},
        {"rates": {"USD": -1.1}},
        {"rates": {"USD": True}},
        {"result": "error"},
        ["not", "a", "dict"],
        b"not json",
    ])
    async def test_bad_payload_falls_back(self, server, fx_provider, payload):
        server.payload = payload

        info = await fx_provider.get_rate_info()

        assert info.rate == Decimal("1.08")
        assert info.source == "fallback"

    @pytest.mark.asyncio
    async def test_nan_rate_falls_back(self, server, fx_provider):
        server.payload = b'{"rates": {"USD": NaN}}'
        assert await fx_provider.get_rate() == Decimal("1.08")

    @pytest.mark.asyncio
    async def test_http_error_falls_back(self, server, fx_provider):
        server.status_code = 500
        assert await fx_provider.get_rate() == Decimal("1.08")

    @pytest.mark.asyncio
    async def test_network_error_falls_back(self, server, fx_provider):
        server.error = httpx.ConnectTimeout("timed out")
        info = await fx_provider.get_rate_info()
        assert info.is_fallback is True

    @pytest.mark.asyncio
    async def test_fallback_is_not_cached(self, server, fx_provider):
        server.status_code = 503
        await fx_provider.get_rate()

        server.status_code = 200
        info = await fx_provider.get_rate_info()

        assert info.source == "live"
        assert server.requests == 2

    def test_rejects_non_positive_fallback(self):
        with pytest.raises(ValueError):
            ExchangeRateProvider(url=RATE_URL, fallback_rate=Decimal("0"), clock=FakeClock())


# =============================================================================
# CONVERSION HELPERS
# =============================================================================

class TestConversions:
    @pytest.mark.asyncio
    async def test_usd_to_eur_at_current_rate(self, server, fx_provider):
        server.payload = {"rates": {"USD": 1.10}}
        eur = await fx_provider.usd_to_eur(Decimal("1200"))
        assert eur.quantize(Decimal("0.01")) == Decimal("1090.91")

    @pytest.mark.asyncio
    async def test_eur_to_usd_at_fallback_rate(self, server, fx_provider):
        server.status_code = 500
        assert await fx_provider.eur_to_usd(Decimal("100")) == Decimal("108.00")

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self, fx_provider, server):
        await fx_provider.aclose()
        assert await fx_provider.get_rate() == Decimal("1.0712")
