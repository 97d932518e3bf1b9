# projectdollar/dependencies.py
"""
Dependency injection module for FastAPI services.

This module provides singleton service instances that are shared across
all requests. Sharing matters here: the price cache, the EUR/USD rate
cache and the value history live inside these instances.

Services are lazily initialized on first use to avoid import-time side effects.

Usage in routers:
    from projectdollar.dependencies import get_holdings_service

    @router.get("/")
    def list_holdings(
        service: HoldingsService = Depends(get_holdings_service),
    ):
        ...

Tests replace any of these through app.dependency_overrides.
"""

import logging
from functools import lru_cache

from projectdollar.config import settings
from projectdollar.database import SessionLocal
from projectdollar.services.balances_service import BalanceService
from projectdollar.services.fx_rate_service import ExchangeRateProvider
from projectdollar.services.holdings_service import HoldingsService
from projectdollar.services.market_data import (
    AlphaVantageQuoteSource,
    PriceCache,
    PriceProvider,
    QuoteSource,
    YahooQuoteSource,
)
from projectdollar.services.preferences_service import PreferencesService
from projectdollar.services.state_store import StateStore
from projectdollar.services.symbol_lookup import SymbolLookupService
from projectdollar.services.valuation import ValuationService, ValueHistory

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_yahoo_source, get_price_cache (no deps)
# 2. get_quote_sources (yahoo)
# 3. get_price_provider (sources, cache)
# 4. get_fx_provider, get_state_store, get_value_history (no deps)
# 5. user data services (store, fx provider)
# 6. get_valuation_service (price provider, fx provider, history)


@lru_cache(maxsize=1)
def get_yahoo_source() -> YahooQuoteSource:
    """Shared Yahoo source, used for prices and symbol lookup."""
    return YahooQuoteSource()


@lru_cache(maxsize=1)
def get_price_cache() -> PriceCache:
    return PriceCache(ttl_seconds=settings.price_cache_ttl_seconds)


@lru_cache(maxsize=1)
def get_quote_sources() -> tuple[QuoteSource, ...]:
    """
    Build the configured source chain, in priority order.

    Unknown names in PRICE_SOURCES are logged and skipped.
    """
    sources: list[QuoteSource] = []
    for name in settings.price_sources:
        if name == "yahoo":
            sources.append(get_yahoo_source())
        elif name == "alpha_vantage":
            sources.append(AlphaVantageQuoteSource(
                api_key=settings.alpha_vantage_api_key,
                timeout=settings.price_request_timeout,
            ))
        else:
            logger.warning(f"Unknown price source '{name}' in configuration, skipping")
    return tuple(sources)


@lru_cache(maxsize=1)
def get_price_provider() -> PriceProvider:
    """
    Get the singleton PriceProvider instance.

    Shares one price cache across all requests and the background refresh.
    """
    logger.debug("Initializing singleton PriceProvider")
    return PriceProvider(
        sources=get_quote_sources(),
        cache=get_price_cache(),
        timeout=settings.price_request_timeout,
        max_concurrency=settings.price_fetch_concurrency,
        request_delay=settings.price_request_delay,
    )


@lru_cache(maxsize=1)
def get_fx_provider() -> ExchangeRateProvider:
    """Get the singleton ExchangeRateProvider (shares the rate cache)."""
    logger.debug("Initializing singleton ExchangeRateProvider")
    return ExchangeRateProvider(
        url=settings.fx_rate_url,
        cache_ttl=settings.fx_cache_ttl_seconds,
        fallback_rate=settings.fx_fallback_rate,
        timeout=settings.price_request_timeout,
    )


@lru_cache(maxsize=1)
def get_state_store() -> StateStore:
    return StateStore(SessionLocal, key=settings.state_key)


@lru_cache(maxsize=1)
def get_value_history() -> ValueHistory:
    return ValueHistory()


# =============================================================================
# USER DATA SERVICES
# =============================================================================

@lru_cache(maxsize=1)
def get_holdings_service() -> HoldingsService:
    logger.debug("Initializing singleton HoldingsService")
    return HoldingsService(store=get_state_store())


@lru_cache(maxsize=1)
def get_balance_service() -> BalanceService:
    logger.debug("Initializing singleton BalanceService")
    return BalanceService(store=get_state_store(), fx_provider=get_fx_provider())


@lru_cache(maxsize=1)
def get_preferences_service() -> PreferencesService:
    return PreferencesService(store=get_state_store())


@lru_cache(maxsize=1)
def get_symbol_lookup_service() -> SymbolLookupService:
    return SymbolLookupService(
        yahoo=get_yahoo_source(),
        timeout=settings.price_request_timeout,
    )


# =============================================================================
# VALUATION
# =============================================================================

@lru_cache(maxsize=1)
def get_valuation_service() -> ValuationService:
    """
    Get the singleton ValuationService instance.

    Shares the price provider, the rate provider and the value history,
    so every snapshot lands in the same history.
    """
    logger.debug("Initializing singleton ValuationService")
    return ValuationService(
        price_provider=get_price_provider(),
        fx_provider=get_fx_provider(),
        history=get_value_history(),
    )
