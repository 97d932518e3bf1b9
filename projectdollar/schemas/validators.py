# projectdollar/schemas/validators.py
"""
Reusable validation functions for Pydantic schemas.

This module provides:
- Ticker validation and normalization
- Purchase date validation

These validators ensure consistent input handling across all schemas.
"""

import re
from datetime import date

# =============================================================================
# CONSTANTS
# =============================================================================

# Ticker: 1-20 chars, alphanumeric + dots + dashes (BRK.B, BTC-USD), optional caret (^GSPC)
TICKER_PATTERN = re.compile(r'^[\^]?[A-Z0-9][A-Z0-9.\-]{0,19}$')
TICKER_MAX_LENGTH = 20

MIN_VALID_DATE = date(1970, 1, 1)


# =============================================================================
# TICKER VALIDATION
# =============================================================================

def validate_ticker(value: str) -> str:
    """
    Validate and normalize a ticker symbol.

    Valid formats:
    - Standard tickers: AAPL, JEPQ
    - With dots or dashes: BRK.B, BTC-USD
    - Indices with caret: ^GSPC

    Returns:
        Normalized ticker (uppercase, trimmed)

    Raises:
        ValueError: If ticker format is invalid
    """
    if not value or not value.strip():
        raise ValueError("Ticker cannot be empty")

    normalized = value.strip().upper()

    if len(normalized) > TICKER_MAX_LENGTH:
        raise ValueError(f"Ticker cannot exceed {TICKER_MAX_LENGTH} characters")

    if not TICKER_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid ticker format: '{normalized}'. "
            "Ticker must be alphanumeric, may include dots (.) or dashes (-) "
            "or start with caret (^)"
        )

    return normalized


# =============================================================================
# DATE VALIDATION
# =============================================================================

def validate_purchase_date(value: date) -> date:
    """
    Validate that a purchase date is plausible.

    Raises:
        ValueError: Before 1970 or in the future
    """
    if value < MIN_VALID_DATE:
        raise ValueError(f"Purchase date cannot be before {MIN_VALID_DATE}")
    if value > date.today():
        raise ValueError("Purchase date cannot be in the future")
    return value
