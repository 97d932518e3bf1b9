# projectdollar/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer (global handlers in main.py) maps them to HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidPeriodError
    │   ├── InvalidAmountError
    │   └── UnsupportedCurrencyError
    ├── InsufficientBalanceError
    ├── NotFoundError
    │   └── HoldingNotFoundError
    ├── MarketDataError
    │   ├── ProviderUnavailableError
    │   ├── TickerNotFoundError
    │   ├── RateLimitError
    │   └── InvalidQuoteError
    ├── FXRateError
    │   ├── FXProviderError
    │   └── FXConversionError
    └── PersistenceError

MarketDataError and FXProviderError are raised by quote/rate sources and
handled inside the providers; they only reach a router when a caller asks a
source directly.
"""

from decimal import Decimal


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    This is for programmatic validation in the services (bad amount, unknown
    currency, unknown period). Request body validation is handled by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidPeriodError(ValidationError):
    """
    Raised when an unknown aggregation period is requested.

    Valid periods are: day, week, month, year
    """

    def __init__(self, period: object) -> None:
        self.period = period
        super().__init__(
            f"Invalid period: '{period}'. Valid options: day, week, month, year",
            field="period"
        )


class InvalidAmountError(ValidationError):
    """Raised when a deposit, conversion amount or custom rate is not positive."""

    def __init__(self, amount: object, field: str = "amount") -> None:
        self.amount = amount
        super().__init__(f"Invalid {field}: {amount}. Must be greater than zero", field=field)


class UnsupportedCurrencyError(ValidationError):
    """Raised for any currency other than USD or EUR."""

    def __init__(self, currency: object) -> None:
        self.currency = currency
        super().__init__(
            f"Unsupported currency: '{currency}'. Valid options: USD, EUR",
            field="currency"
        )


# =============================================================================
# BALANCE ERRORS
# =============================================================================


class InsufficientBalanceError(ServiceError):
    """
    Raised when a conversion asks for more than the source balance holds.

    Attributes:
        currency: Source currency
        requested: Amount the user asked to convert
        available: Current balance in that currency
    """

    def __init__(self, currency: str, requested: Decimal, available: Decimal) -> None:
        self.currency = currency
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient {currency} balance: requested {requested}, available {available}"
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Holding")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class HoldingNotFoundError(NotFoundError):
    """Raised when no holding has the given id."""

    def __init__(self, holding_id: str) -> None:
        self.holding_id = holding_id
        super().__init__(
            f"Holding {holding_id} not found",
            resource_type="Holding",
            resource_id=holding_id,
        )


# =============================================================================
# MARKET DATA PROVIDER ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for quote source failures.

    Attributes:
        provider: Name of the source that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a quote source cannot be reached.

    Examples:
    - Network error or timeout
    - Server errors (500, 502, 503)
    - Missing API key

    The price chain falls through to the next source.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class TickerNotFoundError(MarketDataError):
    """
    Raised when a source does not know the symbol.

    This is NOT a retryable error.
    """

    def __init__(self, ticker: str, provider: str) -> None:
        message = f"Ticker '{ticker}' not found by {provider}"
        super().__init__(message, provider=provider)
        self.ticker = ticker


class RateLimitError(MarketDataError):
    """
    Raised when the source's rate limit has been exceeded.

    This is a retryable error (with backoff).

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class InvalidQuoteError(MarketDataError):
    """
    Raised when a source answers but the price is unusable.

    Examples: unparseable payload, NaN, zero or negative price.
    """

    def __init__(self, ticker: str, provider: str, reason: str) -> None:
        message = f"Invalid quote for '{ticker}' from {provider}: {reason}"
        super().__init__(message, provider=provider)
        self.ticker = ticker
        self.reason = reason


# =============================================================================
# FX RATE ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """
    Base exception for FX rate errors.

    Attributes:
        base_currency: The base currency code
        quote_currency: The quote currency code
    """

    def __init__(
            self,
            message: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        self.base_currency = base_currency
        self.quote_currency = quote_currency
        super().__init__(message)


class FXProviderError(FXRateError):
    """
    Raised when the exchange-rate source fails.

    ExchangeRateProvider catches this and serves the fallback rate.

    Attributes:
        provider: Name or URL of the rate source
        reason: Specific reason for failure
    """

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"FX provider '{provider}' error: {reason}", "EUR", "USD")


class FXConversionError(FXRateError):
    """
    Raised when a conversion is attempted with an unusable rate.

    Examples:
    - Zero or negative rate
    - Missing rate (None)

    Attributes:
        reason: Specific reason for conversion failure
    """

    def __init__(
            self,
            reason: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            f"FX conversion error: {reason}",
            base_currency=base_currency,
            quote_currency=quote_currency,
        )


# =============================================================================
# PERSISTENCE ERRORS
# =============================================================================


class PersistenceError(ServiceError):
    """
    Raised by the state store when the database cannot be read or written.

    Services catch it, log it and keep their in-memory state.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"State {operation} failed: {reason}")


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "InvalidPeriodError",
    "InvalidAmountError",
    "UnsupportedCurrencyError",
    # Balances
    "InsufficientBalanceError",
    # Not Found
    "NotFoundError",
    "HoldingNotFoundError",
    # Market Data
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "InvalidQuoteError",
    # FX Rate
    "FXRateError",
    "FXProviderError",
    "FXConversionError",
    # Persistence
    "PersistenceError",
]
