# projectdollar/schemas/balances.py
"""
Pydantic schemas for cash balances, deposits and conversions.

Currency codes are accepted as plain strings and checked by the service,
which answers 400 (UnsupportedCurrencyError) for anything but USD/EUR.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class BalancesResponse(BaseModel):
    """Current balances."""

    model_config = ConfigDict(from_attributes=True)

    USD: Decimal
    EUR: Decimal


class DepositRequest(BaseModel):
    currency: str = Field(..., examples=["USD", "EUR"])
    amount: Decimal = Field(..., gt=0, examples=["250.00"])
    date: dt.date | None = Field(
        default=None,
        description="Deposit date for the history list (default: today)"
    )


class DepositEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    date: dt.date
    currency: str
    amount: Decimal


class DepositResponse(BaseModel):
    balances: BalancesResponse
    history: list[DepositEntryResponse] = Field(
        default_factory=list,
        description="Deposits made since the service started, newest first"
    )


class ConvertRequest(BaseModel):
    from_currency: str = Field(..., examples=["USD"])
    amount: Decimal = Field(..., gt=0, examples=["100.00"])
    custom_rate: Decimal | None = Field(
        default=None,
        gt=0,
        description="EUR/USD rate (1 EUR = X USD) to use instead of the live rate"
    )


class ConversionResponse(BaseModel):
    """Result of a conversion."""

    model_config = ConfigDict(from_attributes=True)

    from_currency: str
    to_currency: str
    amount: Decimal
    converted_amount: Decimal
    rate: Decimal = Field(..., description="1 EUR = rate USD")
    rate_source: str = Field(..., description="custom, live, cache or fallback")
    rate_display: str = Field(..., examples=["1 USD = 0.9259 EUR"])
    balances: BalancesResponse
