# projectdollar/schemas/valuation.py
"""
Pydantic schemas for portfolio valuation and the value history chart.

Valuation is computed on request and never persisted. Totals are in USD
with an EUR conversion at the rate reported in the response.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# VALUATION SCHEMAS
# =============================================================================

class AssetValuationResponse(BaseModel):
    """Valuation of one holding."""

    model_config = ConfigDict(from_attributes=True)

    holding_id: str
    symbol: str
    name: str
    quantity: Decimal
    purchase_price: Decimal
    effective_price: Decimal = Field(
        ...,
        description="Live price, or the purchase price when no live price is known"
    )
    price_source: str = Field(..., description="'live' or 'purchase'")
    cost_basis: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percent: Decimal = Field(
        ...,
        description="Gain/loss relative to cost basis, in percent (0 when cost basis is 0)"
    )


class PortfolioValuationResponse(BaseModel):
    """
    Complete portfolio valuation.

    missing_prices lists symbols valued at purchase price because every
    price source failed for them.
    """

    model_config = ConfigDict(from_attributes=True)

    total_value_usd: Decimal
    total_value_eur: Decimal
    cost_basis_usd: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    exchange_rate: Decimal = Field(..., description="1 EUR = X USD")
    asset_count: int
    has_complete_prices: bool
    assets: list[AssetValuationResponse] = Field(default_factory=list)
    missing_prices: list[str] = Field(default_factory=list)


# =============================================================================
# HISTORY SCHEMAS
# =============================================================================

class ChartPointResponse(BaseModel):
    """One aggregated bucket of the value history."""

    model_config = ConfigDict(from_attributes=True)

    key: str = Field(..., examples=["2024-W18"])
    label: str = Field(..., examples=["29-05/05"])
    date: dt.date
    value: Decimal


class HistoryResponse(BaseModel):
    period: str = Field(..., examples=["day", "week", "month", "year"])
    points: list[ChartPointResponse]
