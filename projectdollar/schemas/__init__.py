# projectdollar/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

This package contains all Pydantic schemas organized by domain:
- balances: Cash balances, deposits and conversions
- errors: Error response formats
- holdings: Holding CRUD operations
- market_data: Quotes, exchange rate and symbol lookup
- preferences: Opaque user preferences
- validators: Reusable validation functions (ticker, purchase date)
- valuation: Portfolio valuation and value history

Usage:
    from projectdollar.schemas import HoldingCreate, HoldingResponse
    from projectdollar.schemas import ConvertRequest, ConversionResponse
    from projectdollar.schemas import PortfolioValuationResponse
"""

from projectdollar.schemas.balances import (
    BalancesResponse,
    ConversionResponse,
    ConvertRequest,
    DepositEntryResponse,
    DepositRequest,
    DepositResponse,
)
from projectdollar.schemas.errors import ErrorDetail, ValidationErrorDetail
from projectdollar.schemas.holdings import HoldingCreate, HoldingResponse, HoldingUpdate
from projectdollar.schemas.market_data import (
    ExchangeRateResponse,
    PriceResponse,
    QuoteAttemptResponse,
    SymbolMatchResponse,
)
from projectdollar.schemas.preferences import PreferencesResponse, PreferencesUpdate
from projectdollar.schemas.valuation import (
    AssetValuationResponse,
    ChartPointResponse,
    HistoryResponse,
    PortfolioValuationResponse,
)

__all__ = [
    # Balances
    "BalancesResponse",
    "ConversionResponse",
    "ConvertRequest",
    "DepositEntryResponse",
    "DepositRequest",
    "DepositResponse",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # Holdings
    "HoldingCreate",
    "HoldingResponse",
    "HoldingUpdate",
    # Market data
    "ExchangeRateResponse",
    "PriceResponse",
    "QuoteAttemptResponse",
    "SymbolMatchResponse",
    # Preferences
    "PreferencesResponse",
    "PreferencesUpdate",
    # Valuation
    "AssetValuationResponse",
    "ChartPointResponse",
    "HistoryResponse",
    "PortfolioValuationResponse",
]
