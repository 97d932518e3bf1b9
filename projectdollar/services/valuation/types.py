# projectdollar/services/valuation/types.py
"""
Data types for the Valuation Engine.

These dataclasses are used by the calculators and services. They are NOT
Pydantic schemas; those are defined in projectdollar/schemas/ for API
serialization.

Design Principles:
- Immutable where possible (frozen=True for value objects)
- Use Decimal for ALL financial values (never float)
- Use date (not datetime) for history points

Type Hierarchy:
    Holding             - A user's position in one symbol (persisted)
    AssetValuation      - Valuation of one holding against a price
    PortfolioSnapshot   - Totals plus per-holding valuations
    HistoryPoint        - Recorded portfolio value on a date
    ChartPoint          - One aggregated bucket for charting
    Period              - Aggregation granularity
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Literal

from projectdollar.services.constants import MONEY_QUANTUM


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        # Older records stored the display format
        return datetime.strptime(text, "%d/%m/%Y").date()


def _first(record: dict[str, Any], *keys: str) -> Any:
    """Value of the first key present; old records used camelCase names."""
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


# =============================================================================
# HOLDINGS
# =============================================================================

@dataclass(frozen=True)
class Holding:
    """
    A position in one symbol as entered by the user.

    Attributes:
        id: Stable identifier (uuid4 hex), targeted by edits and deletes
        symbol: Ticker, stripped and upper-cased
        name: Display name
        purchase_price: Price paid per unit (USD)
        quantity: Units held
        purchase_date: Date of purchase
        total_value: purchase_price × quantity, rounded to cents
        logo_url: Optional logo for the UI

    Note:
        total_value is a snapshot taken when the holding is created or
        edited. It is never recomputed implicitly; live value comes from
        the Valuation Engine.
    """

    id: str
    symbol: str
    name: str
    purchase_price: Decimal
    quantity: Decimal
    purchase_date: date
    total_value: Decimal
    logo_url: str | None = None

    @classmethod
    def create(
            cls,
            symbol: str,
            name: str,
            purchase_price: Decimal,
            quantity: Decimal,
            purchase_date: date,
            logo_url: str | None = None,
            holding_id: str | None = None,
    ) -> Holding:
        """Build a holding, normalizing the symbol and snapshotting total_value."""
        return cls(
            id=holding_id or uuid.uuid4().hex,
            symbol=symbol.strip().upper(),
            name=name.strip(),
            purchase_price=purchase_price,
            quantity=quantity,
            purchase_date=purchase_date,
            total_value=quantize_money(purchase_price * quantity),
            logo_url=logo_url,
        )

    def with_changes(self, **changes: Any) -> Holding:
        """Copy with edited fields; total_value is re-snapshotted."""
        updated = replace(self, **changes)
        return replace(
            updated,
            symbol=updated.symbol.strip().upper(),
            total_value=quantize_money(updated.purchase_price * updated.quantity),
        )

    def to_record(self) -> dict[str, Any]:
        """JSON-safe dict for the state store (Decimals and dates as strings)."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "purchase_price": str(self.purchase_price),
            "quantity": str(self.quantity),
            "purchase_date": self.purchase_date.isoformat(),
            "total_value": str(self.total_value),
            "logo_url": self.logo_url,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Holding:
        """
        Rebuild a holding from a stored dict.

        Records written before holdings had ids get a fresh one, and the
        older camelCase layout (price, purchaseDate, totalValue, logoUrl) is
        accepted. A stored total_value is kept as-is; it is only computed
        when missing.
        """
        purchase_price = _to_decimal(_first(record, "purchase_price", "price"))
        quantity = _to_decimal(record["quantity"])
        stored_total = _first(record, "total_value", "totalValue")
        return cls(
            id=record.get("id") or uuid.uuid4().hex,
            symbol=str(record["symbol"]).strip().upper(),
            name=str(record.get("name") or ""),
            purchase_price=purchase_price,
            quantity=quantity,
            purchase_date=_to_date(_first(record, "purchase_date", "purchaseDate")),
            total_value=(
                _to_decimal(stored_total) if stored_total is not None
                else quantize_money(purchase_price * quantity)
            ),
            logo_url=_first(record, "logo_url", "logoUrl") or None,
        )


# =============================================================================
# VALUATION RESULTS
# =============================================================================

PriceSource = Literal["live", "purchase"]


@dataclass(frozen=True)
class AssetValuation:
    """
    Valuation of one holding.

    Attributes:
        holding_id: Id of the valued holding
        symbol: Ticker
        name: Display name
        quantity: Units held
        purchase_price: Price paid per unit
        effective_price: Live price, or purchase price when none is known
        price_source: "live" or "purchase"
        cost_basis: purchase_price × quantity
        current_value: effective_price × quantity
        gain_loss: current_value - cost_basis
        gain_loss_percent: gain_loss / cost_basis × 100 (0 when cost basis is 0)
    """

    holding_id: str
    symbol: str
    name: str
    quantity: Decimal
    purchase_price: Decimal
    effective_price: Decimal
    price_source: PriceSource
    cost_basis: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_percent: Decimal

    @property
    def has_live_price(self) -> bool:
        return self.price_source == "live"


@dataclass(frozen=True)
class PortfolioSnapshot:
    """
    Portfolio totals at the moment of computation.

    Attributes:
        total_value_usd: Sum of current values
        total_value_eur: total_value_usd converted at exchange_rate
        cost_basis_usd: Sum of cost bases
        total_gain_loss: total_value_usd - cost_basis_usd
        total_gain_loss_percent: Relative to cost basis (0 when cost basis is 0)
        exchange_rate: Rate used (1 EUR = rate USD)
        assets: Per-holding valuations, in input order
        missing_prices: Symbols valued at purchase price (no live price)

    Note:
        Derived only; never persisted.
    """

    total_value_usd: Decimal
    total_value_eur: Decimal
    cost_basis_usd: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    exchange_rate: Decimal
    assets: tuple[AssetValuation, ...] = field(default_factory=tuple)
    missing_prices: tuple[str, ...] = field(default_factory=tuple)

    @property
    def asset_count(self) -> int:
        return len(self.assets)

    @property
    def has_complete_prices(self) -> bool:
        return not self.missing_prices


# =============================================================================
# HISTORY
# =============================================================================

class Period(str, Enum):
    """Aggregation granularity for the history chart."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class HistoryPoint:
    """
    Portfolio value recorded on a date.

    Attributes:
        date: Day of the recording
        value: Total value in USD
    """

    date: date
    value: Decimal

    @classmethod
    def from_raw(cls, raw: HistoryPoint | dict[str, Any] | tuple) -> HistoryPoint:
        """
        Accept a HistoryPoint, a {"date", "value"} dict or a (date, value)
        pair. Dates may be ISO strings.
        """
        if isinstance(raw, HistoryPoint):
            return raw
        if isinstance(raw, dict):
            return cls(date=_to_date(raw["date"]), value=_to_decimal(raw["value"]))
        raw_date, raw_value = raw
        return cls(date=_to_date(raw_date), value=_to_decimal(raw_value))


@dataclass(frozen=True)
class ChartPoint:
    """
    One aggregated bucket.

    Attributes:
        key: Bucket key ("2024-05-02", "2024-W18", "2024-05", "2024")
        label: Display label ("02/05", "29-05/05", "May '24", "2024")
        date: Date of the point that represents the bucket (the latest)
        value: Value of that point
    """

    key: str
    label: str
    date: date
    value: Decimal


class ValueHistory:
    """
    In-memory sequence of recorded portfolio values.

    Lives for the process lifetime; one instance is shared through
    dependencies.get_value_history.
    """

    def __init__(self, points: list[HistoryPoint] | None = None) -> None:
        self._points: list[HistoryPoint] = list(points or [])

    def append(self, point: HistoryPoint) -> None:
        self._points.append(point)

    def points(self) -> list[HistoryPoint]:
        return list(self._points)

    def clear(self) -> None:
        self._points = []

    def __len__(self) -> int:
        return len(self._points)
