# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database fixtures (in-memory SQLite state store)
- Fake quote sources and rate providers
- A steppable clock for cache expiry
- Sample holdings
"""

import os

# Settings are read at import time; force the test profile first
os.environ["ENVIRONMENT"] = "test"

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from projectdollar.models import Base
from projectdollar.services.exceptions import TickerNotFoundError
from projectdollar.services.market_data.base import QuoteSource
from projectdollar.services.market_data.price_cache import PriceCache
from projectdollar.services.state_store import StateStore
from projectdollar.services.valuation.types import Holding


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def state_store(session_factory) -> StateStore:
    return StateStore(session_factory, key="test:state")


def broken_session_factory():
    """Session factory whose sessions fail every query like a locked database."""
    session = MagicMock()
    session.__enter__.return_value = session
    session.get.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
    return MagicMock(return_value=session)


# =============================================================================
# CLOCK
# =============================================================================

class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def price_cache(clock) -> PriceCache:
    return PriceCache(ttl_seconds=300, clock=clock)


# =============================================================================
# FAKE QUOTE SOURCE
# =============================================================================

class FakeQuoteSource(QuoteSource):
    """
    In-memory QuoteSource for testing.

    Prices and errors are configured per symbol; unknown symbols raise
    TickerNotFoundError. Every call is recorded.
    """

    RETRY_MIN_WAIT = 0
    RETRY_MAX_WAIT = 0

    def __init__(
            self,
            name: str = "fake",
            prices: dict[str, Decimal] | None = None,
            errors: dict[str, Exception] | None = None,
            enabled: bool = True,
    ):
        self._name = name
        self.prices = dict(prices or {})
        self.errors = dict(errors or {})
        self.enabled = enabled
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    def is_enabled(self) -> bool:
        return self.enabled

    async def fetch_price(self, symbol: str) -> Decimal:
        self.calls.append(symbol)
        if symbol in self.errors:
            raise self.errors[symbol]
        if symbol in self.prices:
            return self.prices[symbol]
        raise TickerNotFoundError(symbol, self._name)


@pytest.fixture
def fake_source() -> FakeQuoteSource:
    return FakeQuoteSource(name="primary")


# =============================================================================
# FAKE RATE PROVIDER
# =============================================================================

@dataclass
class FakeRateInfo:
    rate: Decimal
    fetched_at: datetime
    source: str


class StaticRateProvider:
    """Stands in for ExchangeRateProvider with a fixed EUR/USD rate."""

    def __init__(self, rate: Decimal = Decimal("1.08"), source: str = "live"):
        self.rate = rate
        self.source = source
        self.calls = 0

    async def get_rate(self) -> Decimal:
        self.calls += 1
        return self.rate

    async def get_rate_info(self) -> FakeRateInfo:
        self.calls += 1
        return FakeRateInfo(self.rate, datetime.now(timezone.utc), self.source)

    async def aclose(self) -> None:
        pass


@pytest.fixture
def rate_provider() -> StaticRateProvider:
    return StaticRateProvider()


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def make_holding(
        symbol: str = "AAPL",
        purchase_price: str = "100",
        quantity: str = "2",
        name: str = "",
        purchase_date: date = date(2024, 1, 5),
) -> Holding:
    """Create a Holding with sensible defaults."""
    return Holding.create(
        symbol=symbol,
        name=name or symbol,
        purchase_price=Decimal(purchase_price),
        quantity=Decimal(quantity),
        purchase_date=purchase_date,
    )


# =============================================================================
# API FIXTURES
# =============================================================================

@dataclass
class ApiContext:
    """Services wired into the app for one API test."""

    client: object
    source: FakeQuoteSource
    rate_provider: StaticRateProvider
    store: StateStore


@pytest.fixture
def api(state_store, price_cache) -> ApiContext:
    """
    TestClient with every service dependency overridden.

    Prices come from a FakeQuoteSource, the rate from a StaticRateProvider
    and state from the in-memory SQLite store.
    """
    from fastapi.testclient import TestClient

    from projectdollar import dependencies
    from projectdollar.main import app
    from projectdollar.services.balances_service import BalanceService
    from projectdollar.services.holdings_service import HoldingsService
    from projectdollar.services.market_data.price_provider import PriceProvider
    from projectdollar.services.preferences_service import PreferencesService
    from projectdollar.services.symbol_lookup import SymbolLookupService
    from projectdollar.services.valuation import ValuationService

    source = FakeQuoteSource(name="primary")
    rate_provider = StaticRateProvider(Decimal("1.08"))
    price_provider = PriceProvider([source], price_cache, timeout=1)

    holdings = HoldingsService(state_store)
    balances = BalanceService(state_store, rate_provider)
    preferences = PreferencesService(state_store)
    lookup = SymbolLookupService(yahoo=None)
    valuation = ValuationService(price_provider, rate_provider, today=lambda: date(2024, 5, 2))

    app.dependency_overrides.update({
        dependencies.get_price_provider: lambda: price_provider,
        dependencies.get_fx_provider: lambda: rate_provider,
        dependencies.get_holdings_service: lambda: holdings,
        dependencies.get_balance_service: lambda: balances,
        dependencies.get_preferences_service: lambda: preferences,
        dependencies.get_symbol_lookup_service: lambda: lookup,
        dependencies.get_valuation_service: lambda: valuation,
    })
    try:
        yield ApiContext(
            client=TestClient(app),
            source=source,
            rate_provider=rate_provider,
            store=state_store,
        )
    finally:
        app.dependency_overrides.clear()
