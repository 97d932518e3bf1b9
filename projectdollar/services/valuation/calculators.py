# projectdollar/services/valuation/calculators.py
"""
Point-in-time valuation calculators.

Each calculator follows the Single Responsibility Principle:
- CostBasisCalculator: What was paid for a holding
- ValueCalculator: What a holding is worth now (live or purchase price)
- GainLossCalculator: Unrealized gain/loss and its percentage

compute_snapshot() combines them into a PortfolioSnapshot.

Design Principles:
- Stateless (no instance state, pure functions)
- Receives all inputs explicitly (prices and rate are fetched by the service)
- Uses Decimal for ALL financial calculations
- Money and percentages rounded to 0.01, half up

Usage:
    snapshot = compute_snapshot(
        holdings=[...],
        prices={"AAPL": Decimal("120")},
        rate=Decimal("1.10"),
    )
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping, Sequence

from projectdollar.services.constants import PERCENT_QUANTUM
from projectdollar.services.valuation.types import (
    AssetValuation,
    Holding,
    PortfolioSnapshot,
    PriceSource,
    quantize_money,
)
from projectdollar.utils import fx_conversion

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


# =============================================================================
# COST BASIS CALCULATOR
# =============================================================================

class CostBasisCalculator:
    """
    Cost basis of a holding.

    Formula:
        cost_basis = purchase_price × quantity
    """

    def calculate(self, holding: Holding) -> Decimal:
        return quantize_money(holding.purchase_price * holding.quantity)


# =============================================================================
# VALUE CALCULATOR
# =============================================================================

class ValueCalculator:
    """
    Current value of a holding.

    Uses the live price when one is known and positive, otherwise the
    purchase price, so a holding without market data shows zero gain
    rather than disappearing from the totals.
    """

    def calculate(
            self,
            holding: Holding,
            live_price: Decimal | None,
    ) -> tuple[Decimal, Decimal, PriceSource]:
        """
        Args:
            holding: The holding to value
            live_price: Latest market price, or None

        Returns:
            Tuple of (current_value, effective_price, price_source)
        """
        if live_price is not None and live_price > ZERO:
            effective_price, source = live_price, "live"
        else:
            effective_price, source = holding.purchase_price, "purchase"

        return quantize_money(effective_price * holding.quantity), effective_price, source


# =============================================================================
# GAIN / LOSS CALCULATOR
# =============================================================================

class GainLossCalculator:
    """
    Unrealized gain/loss (paper gains/losses).

    Formula:
        gain_loss = current_value - cost_basis
        gain_loss_percent = (gain_loss / cost_basis) × 100

    Note:
        The percentage is 0 when the cost basis is 0 (free shares, zero
        quantity), never a division error.
    """

    def calculate(
            self,
            cost_basis: Decimal,
            current_value: Decimal,
    ) -> tuple[Decimal, Decimal]:
        """
        Returns:
            Tuple of (amount, percentage), both rounded to 0.01
        """
        gain_loss = current_value - cost_basis

        if cost_basis == ZERO:
            percent = ZERO
        else:
            percent = (gain_loss / cost_basis) * HUNDRED

        return (
            quantize_money(gain_loss),
            percent.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP),
        )


# =============================================================================
# SNAPSHOT
# =============================================================================

_cost_basis_calc = CostBasisCalculator()
_value_calc = ValueCalculator()
_gain_loss_calc = GainLossCalculator()


def value_holding(holding: Holding, live_price: Decimal | None) -> AssetValuation:
    """Value one holding against an optional live price."""
    cost_basis = _cost_basis_calc.calculate(holding)
    current_value, effective_price, source = _value_calc.calculate(holding, live_price)
    gain_loss, gain_loss_percent = _gain_loss_calc.calculate(cost_basis, current_value)

    return AssetValuation(
        holding_id=holding.id,
        symbol=holding.symbol,
        name=holding.name,
        quantity=holding.quantity,
        purchase_price=holding.purchase_price,
        effective_price=effective_price,
        price_source=source,
        cost_basis=cost_basis,
        current_value=current_value,
        gain_loss=gain_loss,
        gain_loss_percent=gain_loss_percent,
    )


def compute_snapshot(
        holdings: Sequence[Holding],
        prices: Mapping[str, Decimal],
        rate: Decimal,
) -> PortfolioSnapshot:
    """
    Value a list of holdings.

    Pure: identical inputs give equal snapshots and nothing passed in is
    mutated.

    Args:
        holdings: Holdings to value
        prices: Live prices by upper-case symbol (missing symbols allowed)
        rate: EUR/USD rate (1 EUR = rate USD)

    Returns:
        PortfolioSnapshot with totals rounded to 0.01

    Raises:
        FXConversionError: If rate is zero or negative
    """
    assets: list[AssetValuation] = []
    missing: list[str] = []

    for holding in holdings:
        valuation = value_holding(holding, prices.get(holding.symbol))
        assets.append(valuation)
        if not valuation.has_live_price and holding.symbol not in missing:
            missing.append(holding.symbol)

    total_value = sum((a.current_value for a in assets), ZERO)
    cost_basis = sum((a.cost_basis for a in assets), ZERO)
    total_gain_loss, total_percent = _gain_loss_calc.calculate(cost_basis, total_value)

    if missing:
        logger.debug(f"Valued at purchase price (no live quote): {missing}")

    return PortfolioSnapshot(
        total_value_usd=quantize_money(total_value),
        total_value_eur=quantize_money(fx_conversion.usd_to_eur(total_value, rate)),
        cost_basis_usd=quantize_money(cost_basis),
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=total_percent,
        exchange_rate=rate,
        assets=tuple(assets),
        missing_prices=tuple(missing),
    )
