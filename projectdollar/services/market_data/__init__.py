# projectdollar/services/market_data/__init__.py
"""
Market data services package.

This package contains:
- Abstract interface for quote sources (base.py)
- Yahoo Finance and Alpha Vantage sources (yahoo.py, alpha_vantage.py)
- Per-process latest-price cache (price_cache.py)
- Fallback chain, batch and sequential fetching (price_provider.py)

Architecture:
    PriceProvider
    ├── PriceCache
    └── [QuoteSource, ...]  (ordered, first OK wins)
        ├── YahooQuoteSource        (primary)
        └── AlphaVantageQuoteSource (secondary, needs API key)
"""

from projectdollar.services.market_data.base import (
    QuoteSource,
    QuoteStatus,
    QuoteAttempt,
    PriceResolution,
)
from projectdollar.services.market_data.price_cache import (
    PriceCache,
    PriceQuote,
    normalize_symbol,
)
from projectdollar.services.market_data.price_provider import PriceProvider
from projectdollar.services.market_data.yahoo import YahooQuoteSource
from projectdollar.services.market_data.alpha_vantage import AlphaVantageQuoteSource

__all__ = [
    # Interface and results
    "QuoteSource",
    "QuoteStatus",
    "QuoteAttempt",
    "PriceResolution",
    # Cache
    "PriceCache",
    "PriceQuote",
    "normalize_symbol",
    # Chain
    "PriceProvider",
    # Concrete sources
    "YahooQuoteSource",
    "AlphaVantageQuoteSource",
]
