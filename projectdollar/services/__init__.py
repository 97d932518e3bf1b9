# projectdollar/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive their collaborators (providers, caches, store) via constructors
- Are easily testable via dependency injection

Usage:
    from projectdollar.services import ValuationService, PriceProvider
    from projectdollar.services import ExchangeRateProvider
    from projectdollar.services import (
        ServiceError,
        InsufficientBalanceError,
        HoldingNotFoundError,
    )

Architecture:
    services/
    ├── __init__.py              # This file - main exports
    ├── exceptions.py            # Domain exceptions
    ├── constants.py             # Business constants
    ├── state_store.py           # Persisted state document
    ├── holdings_service.py      # Holdings CRUD
    ├── balances_service.py      # Deposits and currency conversion
    ├── preferences_service.py   # Opaque user preferences
    ├── symbol_lookup.py         # Ticker → company name
    ├── refresh.py               # Periodic background refresh
    ├── fx_rate_service.py       # Exchange Rate Provider
    ├── market_data/             # Price cache, quote sources, fallback chain
    └── valuation/               # Valuation engine and history aggregation
"""

# Exceptions (imported first; other modules depend on them)
from projectdollar.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidPeriodError,
    InvalidAmountError,
    UnsupportedCurrencyError,
    InsufficientBalanceError,
    NotFoundError,
    HoldingNotFoundError,
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    InvalidQuoteError,
    FXRateError,
    FXProviderError,
    FXConversionError,
    PersistenceError,
)
# Exchange Rate Provider
from projectdollar.services.fx_rate_service import ExchangeRateProvider, ExchangeRate
# Market data
from projectdollar.services.market_data import (
    PriceCache,
    PriceProvider,
    QuoteSource,
    QuoteStatus,
    QuoteAttempt,
    PriceResolution,
    YahooQuoteSource,
    AlphaVantageQuoteSource,
)
# Valuation
from projectdollar.services.valuation import (
    ValuationService,
    TimeSeriesAggregator,
    compute_snapshot,
    Holding,
    PortfolioSnapshot,
    ValueHistory,
)
# State and user data
from projectdollar.services.state_store import StateStore
from projectdollar.services.holdings_service import HoldingsService
from projectdollar.services.balances_service import BalanceService, Balances, ConversionResult
from projectdollar.services.preferences_service import PreferencesService
from projectdollar.services.symbol_lookup import SymbolLookupService, SymbolMatch
from projectdollar.services.refresh import RefreshHandle, schedule_periodic

__all__ = [
    # Exceptions
    "ServiceError",
    "ValidationError",
    "InvalidPeriodError",
    "InvalidAmountError",
    "UnsupportedCurrencyError",
    "InsufficientBalanceError",
    "NotFoundError",
    "HoldingNotFoundError",
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "InvalidQuoteError",
    "FXRateError",
    "FXProviderError",
    "FXConversionError",
    "PersistenceError",
    # FX
    "ExchangeRateProvider",
    "ExchangeRate",
    # Market data
    "PriceCache",
    "PriceProvider",
    "QuoteSource",
    "QuoteStatus",
    "QuoteAttempt",
    "PriceResolution",
    "YahooQuoteSource",
    "AlphaVantageQuoteSource",
    # Valuation
    "ValuationService",
    "TimeSeriesAggregator",
    "compute_snapshot",
    "Holding",
    "PortfolioSnapshot",
    "ValueHistory",
    # State and user data
    "StateStore",
    "HoldingsService",
    "BalanceService",
    "Balances",
    "ConversionResult",
    "PreferencesService",
    "SymbolLookupService",
    "SymbolMatch",
    "RefreshHandle",
    "schedule_periodic",
]
