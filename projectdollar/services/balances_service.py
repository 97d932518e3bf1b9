# projectdollar/services/balances_service.py
"""
Cash balances in USD and EUR: deposits and currency conversion.

Balances are rounded to 0.01 on every change and persisted to the
"balances" slice of the state store. Deposit history is kept in memory only
(newest first) for the current process.

Conversion uses the live EUR/USD rate unless the user supplies a custom one:
    USD → EUR:  converted = amount ÷ rate
    EUR → USD:  converted = amount × rate

Every check runs before any balance changes, so a rejected request leaves
the balances exactly as they were.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any

from projectdollar.services.constants import RATE_DISPLAY_QUANTUM, SUPPORTED_CURRENCIES
from projectdollar.services.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
)
from projectdollar.services.state_store import StateStore, load_slice, save_slice
from projectdollar.services.valuation.types import quantize_money
from projectdollar.utils import fx_conversion

if TYPE_CHECKING:
    from projectdollar.services.fx_rate_service import ExchangeRateProvider

logger = logging.getLogger(__name__)

STATE_SLICE = "balances"
ZERO = Decimal("0")


# =============================================================================
# RESULT DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Balances:
    """Cash held per currency."""

    USD: Decimal = ZERO
    EUR: Decimal = ZERO

    def get(self, currency: str) -> Decimal:
        return getattr(self, currency)

    def to_record(self) -> dict[str, str]:
        return {"USD": str(self.USD), "EUR": str(self.EUR)}

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> Balances:
        record = record or {}
        values = {}
        for currency in SUPPORTED_CURRENCIES:
            try:
                values[currency] = quantize_money(Decimal(str(record.get(currency, "0"))))
            except (InvalidOperation, ValueError):
                logger.warning(f"Unreadable stored {currency} balance {record.get(currency)!r}; using 0")
                values[currency] = ZERO
        return cls(**values)


@dataclass(frozen=True)
class DepositEntry:
    """One deposit, as shown in the history list."""

    id: str
    date: date
    currency: str
    amount: Decimal


@dataclass(frozen=True)
class ConversionResult:
    """
    Outcome of a currency conversion.

    Attributes:
        from_currency: Currency debited
        to_currency: Currency credited
        amount: Amount debited
        converted_amount: Amount credited, rounded to 0.01
        rate: EUR/USD rate applied (1 EUR = rate USD)
        rate_source: "custom", "live", "cache" or "fallback"
        balances: Balances after the conversion
    """

    from_currency: str
    to_currency: str
    amount: Decimal
    converted_amount: Decimal
    rate: Decimal
    rate_source: str
    balances: Balances


# =============================================================================
# SERVICE
# =============================================================================

class BalanceService:
    """
    Deposits and conversions over the USD/EUR balances.

    Args:
        store: State store holding the "balances" slice
        fx_provider: Live EUR/USD rate for conversions without a custom rate
    """

    def __init__(self, store: StateStore, fx_provider: ExchangeRateProvider) -> None:
        self._store = store
        self._fx_provider = fx_provider
        self._balances: Balances | None = None
        self._deposits: list[DepositEntry] = []

    def get_balances(self) -> Balances:
        if self._balances is None:
            self._balances = Balances.from_record(load_slice(self._store, STATE_SLICE, {}))
        return self._balances

    def deposit_history(self) -> list[DepositEntry]:
        """Deposits made in this process, newest first."""
        return list(self._deposits)

    def deposit(
            self,
            currency: str,
            amount: Decimal,
            deposit_date: date | None = None,
    ) -> Balances:
        """
        Add money to one balance.

        Raises:
            UnsupportedCurrencyError: Not USD or EUR
            InvalidAmountError: Amount not greater than zero
        """
        code = fx_conversion.normalize_currency(currency)
        self._require_positive(amount, "amount")

        current = self.get_balances()
        updated = self._with_balance(current, code, current.get(code) + amount)
        self._commit(updated)

        self._deposits.insert(0, DepositEntry(
            id=uuid.uuid4().hex,
            date=deposit_date or date.today(),
            currency=code,
            amount=amount,
        ))
        logger.info(f"Deposited {amount} {code}; balance now {updated.get(code)} {code}")
        return updated

    async def convert(
            self,
            from_currency: str,
            amount: Decimal,
            custom_rate: Decimal | None = None,
    ) -> ConversionResult:
        """
        Move money from one currency to the other.

        Args:
            from_currency: "USD" or "EUR"; the other one is credited
            amount: Amount to debit
            custom_rate: Rate to use instead of the live one (1 EUR = X USD)

        Raises:
            UnsupportedCurrencyError: Not USD or EUR
            InvalidAmountError: Amount or custom rate not greater than zero
            InsufficientBalanceError: Source balance lower than amount
        """
        source = fx_conversion.normalize_currency(from_currency)
        target = "EUR" if source == "USD" else "USD"
        self._require_positive(amount, "amount")

        if custom_rate is None:
            info = await self._fx_provider.get_rate_info()
            rate, rate_source = info.rate, info.source
        else:
            rate, rate_source = custom_rate, "custom"

        # No await from here to the commit: the balance read is the one updated
        current = self.get_balances()
        available = current.get(source)
        if available < amount:
            raise InsufficientBalanceError(source, amount, available)
        if custom_rate is not None:
            self._require_positive(custom_rate, "custom_rate")

        converted = quantize_money(fx_conversion.convert(amount, source, target, rate))

        updated = self._with_balance(current, source, available - amount)
        updated = self._with_balance(updated, target, updated.get(target) + converted)
        self._commit(updated)

        logger.info(
            f"Converted {amount} {source} → {converted} {target} at {rate} ({rate_source})"
        )
        return ConversionResult(
            from_currency=source,
            to_currency=target,
            amount=amount,
            converted_amount=converted,
            rate=rate,
            rate_source=rate_source,
            balances=updated,
        )

    @staticmethod
    def describe_rate(from_currency: str, rate: Decimal) -> str:
        """
        Human-readable rate for the conversion direction.

        Example:
            describe_rate("USD", Decimal("1.08"))  # "1 USD = 0.9259 EUR"
            describe_rate("EUR", Decimal("1.08"))  # "1 EUR = 1.0800 USD"
        """
        source = fx_conversion.normalize_currency(from_currency)
        if source == "USD":
            shown = fx_conversion.usd_to_eur(Decimal("1"), rate)
            return f"1 USD = {shown.quantize(RATE_DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)} EUR"
        return f"1 EUR = {Decimal(rate).quantize(RATE_DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)} USD"

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    @staticmethod
    def _require_positive(value: Decimal | None, field: str) -> None:
        if value is None or not value.is_finite() or value <= 0:
            raise InvalidAmountError(value, field=field)

    @staticmethod
    def _with_balance(balances: Balances, currency: str, value: Decimal) -> Balances:
        values = {"USD": balances.USD, "EUR": balances.EUR}
        values[currency] = quantize_money(value)
        return Balances(**values)

    def _commit(self, balances: Balances) -> None:
        self._balances = balances
        save_slice(self._store, STATE_SLICE, balances.to_record())
