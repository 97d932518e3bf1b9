# projectdollar/schemas/market_data.py
"""
Pydantic schemas for quotes, exchange rates and symbol lookup.

These schemas handle:
- Price resolution through the source chain
- The EUR/USD rate
- Ticker to company name lookup
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# PRICE SCHEMAS
# =============================================================================

class QuoteAttemptResponse(BaseModel):
    """Outcome of asking one source for a price."""

    model_config = ConfigDict(from_attributes=True)

    source: str
    status: str = Field(..., description="ok, not_found, invalid, unavailable, rate_limited, timeout")
    price: Decimal | None = None
    reason: str | None = None


class PriceResponse(BaseModel):
    symbol: str
    price: Decimal | None = Field(
        default=None,
        description="Latest price in USD, null when no source could provide one"
    )
    source: str | None = Field(
        default=None,
        description="Source that provided the price ('cache' for a cache hit)"
    )
    attempts: list[QuoteAttemptResponse] = Field(
        default_factory=list,
        description="Sources tried, in order"
    )


# =============================================================================
# EXCHANGE RATE SCHEMAS
# =============================================================================

class ExchangeRateResponse(BaseModel):
    """The EUR/USD rate currently in use."""

    base_currency: str = Field(default="EUR")
    quote_currency: str = Field(default="USD")
    rate: Decimal = Field(..., description="1 EUR = X USD")
    source: str = Field(..., description="live, cache or fallback")
    fetched_at: dt.datetime


# =============================================================================
# SYMBOL LOOKUP SCHEMAS
# =============================================================================

class SymbolMatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    symbol: str
    name: str
    source: str = Field(..., description="'yahoo' or 'builtin'")
