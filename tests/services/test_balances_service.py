# tests/services/test_balances_service.py
"""
Tests for BalanceService.

This module tests:
- Deposits (validation, persistence, history order)
- Conversions at the live, cached, fallback and custom rates
- Insufficient balance and invalid input leave balances unchanged
- Rate display strings
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from projectdollar.services.balances_service import BalanceService, Balances
from projectdollar.services.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    UnsupportedCurrencyError,
)
from projectdollar.services.state_store import StateStore
from tests.conftest import StaticRateProvider, broken_session_factory


@pytest.fixture
def service(state_store, rate_provider) -> BalanceService:
    return BalanceService(state_store, rate_provider)


# =============================================================================
# DEPOSITS
# =============================================================================

class TestDeposit:
    def test_starts_at_zero(self, service):
        assert service.get_balances() == Balances(USD=Decimal("0"), EUR=Decimal("0"))

    def test_deposit_adds_to_one_currency(self, service):
        balances = service.deposit("usd", Decimal("250.50"))

        assert balances.USD == Decimal("250.50")
        assert balances.EUR == Decimal("0")

    def test_deposit_persisted(self, service, state_store, rate_provider):
        service.deposit("EUR", Decimal("100"))

        assert state_store.load()["balances"] == {"USD": "0.00", "EUR": "100.00"}
        assert BalanceService(state_store, rate_provider).get_balances().EUR == Decimal("100.00")

    def test_history_newest_first(self, service):
        service.deposit("USD", Decimal("1"), date(2024, 1, 1))
        service.deposit("EUR", Decimal("2"), date(2024, 1, 2))

        history = service.deposit_history()

        assert [(e.currency, e.amount) for e in history] == [("EUR", Decimal("2")), ("USD", Decimal("1"))]
        assert history[0].date == date(2024, 1, 2)

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("NaN"), None])
    def test_rejects_non_positive(self, service, amount):
        with pytest.raises(InvalidAmountError):
            service.deposit("USD", amount)
        assert service.get_balances().USD == Decimal("0")

    def test_rejects_other_currency(self, service):
        with pytest.raises(UnsupportedCurrencyError):
            service.deposit("GBP", Decimal("10"))


# =============================================================================
# CONVERSIONS
# =============================================================================

class TestConvert:
    @pytest.mark.asyncio
    async def test_usd_to_eur_at_live_rate(self, service):
        service.deposit("USD", Decimal("108"))

        result = await service.convert("USD", Decimal("108"))

        assert result.to_currency == "EUR"
        assert result.converted_amount == Decimal("100.00")
        assert result.rate == Decimal("1.08")
        assert result.rate_source == "live"
        assert result.balances == Balances(USD=Decimal("0.00"), EUR=Decimal("100.00"))

    @pytest.mark.asyncio
    async def test_eur_to_usd(self, service):
        service.deposit("EUR", Decimal("50"))

        result = await service.convert("eur", Decimal("20"))

        assert result.from_currency == "EUR"
        assert result.converted_amount == Decimal("21.60")
        assert result.balances.EUR == Decimal("30.00")
        assert result.balances.USD == Decimal("21.60")

    @pytest.mark.asyncio
    async def test_converted_amount_rounded_to_cents(self, state_store):
        service = BalanceService(state_store, StaticRateProvider(Decimal("1.10")))
        service.deposit("USD", Decimal("1200"))

        result = await service.convert("USD", Decimal("1200"))

        assert result.converted_amount == Decimal("1090.91")

    @pytest.mark.asyncio
    async def test_custom_rate_skips_provider(self, service, rate_provider):
        service.deposit("USD", Decimal("100"))

        result = await service.convert("USD", Decimal("100"), custom_rate=Decimal("1.25"))

        assert result.converted_amount == Decimal("80.00")
        assert result.rate_source == "custom"
        assert rate_provider.calls == 0

    @pytest.mark.asyncio
    async def test_fallback_rate_reported(self, state_store):
        service = BalanceService(state_store, StaticRateProvider(Decimal("1.08"), source="fallback"))
        service.deposit("EUR", Decimal("10"))

        result = await service.convert("EUR", Decimal("10"))

        assert result.rate_source == "fallback"

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, service):
        service.deposit("USD", Decimal("10"))

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await service.convert("USD", Decimal("10.01"))

        assert exc_info.value.available == Decimal("10.00")
        assert service.get_balances().USD == Decimal("10.00")
        assert service.get_balances().EUR == Decimal("0")

    @pytest.mark.asyncio
    async def test_insufficient_balance_checked_before_custom_rate(self, service):
        with pytest.raises(InsufficientBalanceError):
            await service.convert("USD", Decimal("5"), custom_rate=Decimal("0"))

    @pytest.mark.asyncio
    async def test_invalid_custom_rate(self, service):
        service.deposit("USD", Decimal("10"))
        with pytest.raises(InvalidAmountError) as exc_info:
            await service.convert("USD", Decimal("5"), custom_rate=Decimal("-1"))
        assert exc_info.value.field == "custom_rate"

    @pytest.mark.asyncio
    async def test_invalid_amount(self, service):
        with pytest.raises(InvalidAmountError):
            await service.convert("USD", Decimal("0"))

    @pytest.mark.asyncio
    async def test_unsupported_currency(self, service):
        with pytest.raises(UnsupportedCurrencyError):
            await service.convert("JPY", Decimal("1"))

    @pytest.mark.asyncio
    async def test_full_round_trip_stays_within_a_cent(self, service):
        service.deposit("USD", Decimal("333.33"))

        to_eur = await service.convert("USD", Decimal("333.33"))
        back = await service.convert("EUR", to_eur.converted_amount)

        assert abs(back.balances.USD - Decimal("333.33")) <= Decimal("0.01")


# =============================================================================
# DISPLAY
# =============================================================================

class TestDescribeRate:
    def test_usd_direction(self):
        assert BalanceService.describe_rate("USD", Decimal("1.08")) == "1 USD = 0.9259 EUR"

    def test_eur_direction(self):
        assert BalanceService.describe_rate("EUR", Decimal("1.08")) == "1 EUR = 1.0800 USD"


class TestBalancesRecord:
    def test_unreadable_value_defaults_to_zero(self):
        balances = Balances.from_record({"USD": "abc", "EUR": "5"})
        assert balances.USD == Decimal("0")
        assert balances.EUR == Decimal("5.00")


# =============================================================================
# CONCURRENCY AND PERSISTENCE FAILURES
# =============================================================================

class SlowRateProvider(StaticRateProvider):
    """Rate lookups take a while, like a cold cache hitting the network."""

    async def get_rate_info(self):
        await asyncio.sleep(0.01)
        return await super().get_rate_info()


class TestConvertConsistency:
    @pytest.mark.asyncio
    async def test_overlapping_conversions_cannot_overdraw(self, state_store):
        service = BalanceService(state_store, SlowRateProvider(Decimal("1.08")))
        service.deposit("USD", Decimal("100"))

        results = await asyncio.gather(
            service.convert("USD", Decimal("100")),
            service.convert("USD", Decimal("100")),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 1
        assert isinstance(failed[0], InsufficientBalanceError)
        assert service.get_balances() == Balances(USD=Decimal("0.00"), EUR=succeeded[0].converted_amount)

    @pytest.mark.asyncio
    async def test_state_store_failure_keeps_in_memory_balances(self, rate_provider):
        service = BalanceService(StateStore(broken_session_factory()), rate_provider)

        service.deposit("USD", Decimal("108"))
        result = await service.convert("USD", Decimal("54"))

        assert result.converted_amount == Decimal("50.00")
        assert service.get_balances() == Balances(USD=Decimal("54.00"), EUR=Decimal("50.00"))
        assert service.deposit_history()[0].amount == Decimal("108")
