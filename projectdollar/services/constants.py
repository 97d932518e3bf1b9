# projectdollar/services/constants.py
"""
Centralized constants for the ProjectDollar services.

Values that callers may want to tune per deployment live in config.Settings;
the ones here are part of the behaviour (rounding, bucket caps, retry policy).

Usage:
    from projectdollar.services.constants import (
        MONEY_QUANTUM,
        PERIOD_BUCKET_LIMITS,
    )
"""

from decimal import Decimal


# =============================================================================
# ROUNDING
# =============================================================================

# Money and percentages are stored and displayed to the cent
MONEY_QUANTUM: Decimal = Decimal("0.01")
PERCENT_QUANTUM: Decimal = Decimal("0.01")

# Rate shown in "1 USD = 0.9259 EUR"
RATE_DISPLAY_QUANTUM: Decimal = Decimal("0.0001")


# =============================================================================
# PRICE CACHE
# =============================================================================

# Default freshness of a cached quote (5 minutes)
DEFAULT_PRICE_TTL_SECONDS: float = 300.0

# Background refresh period (2 minutes)
DEFAULT_PRICE_REFRESH_INTERVAL_SECONDS: float = 120.0

# The refresh refetches quotes that would expire before its next tick
REFRESH_PRICE_MAX_AGE_SECONDS: float = DEFAULT_PRICE_TTL_SECONDS - DEFAULT_PRICE_REFRESH_INTERVAL_SECONDS


# =============================================================================
# PRICE PROVIDER
# =============================================================================

# Per-source timeout before the chain moves on
DEFAULT_PRICE_TIMEOUT_SECONDS: float = 5.0

# Concurrent lookups in a batch fetch
DEFAULT_FETCH_CONCURRENCY: int = 4

# Pause between lookups in a sequential refresh
DEFAULT_REQUEST_DELAY_SECONDS: float = 1.0

# Symbols that mean "no ticker" in stored data
PLACEHOLDER_SYMBOLS: frozenset[str] = frozenset({"", "0"})


# =============================================================================
# EXCHANGE RATE
# =============================================================================

# 1 EUR = 1.08 USD when the rate source is down
DEFAULT_FALLBACK_EUR_USD_RATE: Decimal = Decimal("1.08")

DEFAULT_FX_CACHE_TTL_SECONDS: float = 3600.0


# =============================================================================
# HISTORY AGGREGATION
# =============================================================================

# Most recent buckets returned per period
PERIOD_BUCKET_LIMITS: dict[str, int] = {
    "day": 8,
    "week": 5,
    "month": 4,
    "year": 5,
}


# =============================================================================
# BALANCES
# =============================================================================

SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "EUR")
