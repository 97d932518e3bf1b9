# projectdollar/schemas/holdings.py
"""
Pydantic schemas for Holding validation.

These schemas define:
- What data clients must send (Create)
- What data clients can update (Update)
- What data the API returns (Response)

Validation layers:
- Field constraints: type, positivity, length
- Field validators: ticker normalization, date plausibility
- Service: existence checks
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from projectdollar.schemas.validators import validate_purchase_date, validate_ticker


class HoldingCreate(BaseModel):
    """Schema for adding a holding."""

    symbol: str = Field(
        ...,
        min_length=1,
        max_length=20,
        examples=["AAPL", "JEPQ"],
        description="Ticker symbol"
    )
    name: str = Field(
        default="",
        max_length=255,
        examples=["Apple Inc."],
        description="Display name (see /symbols/lookup)"
    )
    purchase_price: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        examples=["100.00"],
        description="Price paid per unit in USD"
    )
    quantity: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        examples=["2"],
        description="Units held"
    )
    purchase_date: date = Field(
        ...,
        description="Date of purchase"
    )
    logo_url: str | None = Field(
        default=None,
        max_length=2048,
        description="Optional logo URL"
    )

    @field_validator('symbol')
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return validate_ticker(v)

    @field_validator('purchase_date')
    @classmethod
    def check_purchase_date(cls, v: date) -> date:
        return validate_purchase_date(v)


class HoldingUpdate(BaseModel):
    """
    Schema for editing a holding.

    All fields optional; only the fields sent are changed.
    """

    symbol: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, max_length=255)
    purchase_price: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=8)
    quantity: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=8)
    purchase_date: date | None = None
    logo_url: str | None = Field(default=None, max_length=2048)

    @field_validator('symbol')
    @classmethod
    def normalize_symbol(cls, v: str | None) -> str | None:
        return validate_ticker(v) if v is not None else None

    @field_validator('purchase_date')
    @classmethod
    def check_purchase_date(cls, v: date | None) -> date | None:
        return validate_purchase_date(v) if v is not None else None


class HoldingResponse(BaseModel):
    """Schema for returning a holding."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    symbol: str
    name: str
    purchase_price: Decimal
    quantity: Decimal
    purchase_date: date
    total_value: Decimal = Field(
        ...,
        description="purchase_price × quantity at the time of the last edit"
    )
    logo_url: str | None = None
