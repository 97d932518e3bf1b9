# projectdollar/services/holdings_service.py
"""
Holdings management (create, edit, delete, list).

Holdings live in memory and are mirrored to the "assets" slice of the state
store after every change. Edits and deletes target the holding id, never a
list position.

Failure policy:
    - Invalid input raises ValidationError before anything changes
    - Unknown ids raise HoldingNotFoundError
    - A failed write is logged; the in-memory list stays authoritative
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from projectdollar.services.exceptions import (
    HoldingNotFoundError,
    InvalidAmountError,
    ValidationError,
)
from projectdollar.services.market_data.price_cache import normalize_symbol
from projectdollar.services.state_store import StateStore, load_slice, save_slice
from projectdollar.services.valuation.types import Holding

logger = logging.getLogger(__name__)

STATE_SLICE = "assets"

EDITABLE_FIELDS = frozenset({
    "symbol", "name", "purchase_price", "quantity", "purchase_date", "logo_url",
})


class HoldingsService:
    """
    CRUD over the user's holdings.

    Example:
        service = HoldingsService(store)
        holding = service.add_holding("aapl", "Apple Inc.", Decimal("100"),
                                      Decimal("2"), date(2024, 1, 5))
        service.update_holding(holding.id, quantity=Decimal("3"))
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._holdings: list[Holding] | None = None

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_holdings(self) -> list[Holding]:
        """All holdings in insertion order."""
        return list(self._ensure_loaded())

    def get_holding(self, holding_id: str) -> Holding:
        """
        Raises:
            HoldingNotFoundError: Unknown id
        """
        for holding in self._ensure_loaded():
            if holding.id == holding_id:
                return holding
        raise HoldingNotFoundError(holding_id)

    def symbols(self) -> list[str]:
        """Distinct symbols held, in first-seen order."""
        return list(dict.fromkeys(h.symbol for h in self._ensure_loaded()))

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def add_holding(
            self,
            symbol: str,
            name: str,
            purchase_price: Decimal,
            quantity: Decimal,
            purchase_date: date,
            logo_url: str | None = None,
    ) -> Holding:
        """
        Create a holding and persist the list.

        Raises:
            ValidationError: Blank symbol
            InvalidAmountError: Non-positive price or quantity
        """
        self._validate(symbol, purchase_price, quantity)
        holding = Holding.create(
            symbol=symbol,
            name=name or "",
            purchase_price=purchase_price,
            quantity=quantity,
            purchase_date=purchase_date,
            logo_url=logo_url,
        )

        holdings = self._ensure_loaded() + [holding]
        self._replace(holdings)
        logger.info(f"Holding added: {holding.symbol} x{holding.quantity} @ {holding.purchase_price}")
        return holding

    def update_holding(self, holding_id: str, **changes: Any) -> Holding:
        """
        Edit fields of a holding; total_value is re-snapshotted.

        Fields set to None are left unchanged.

        Raises:
            HoldingNotFoundError: Unknown id
            ValidationError: Unknown field or blank symbol
            InvalidAmountError: Non-positive price or quantity
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit fields: {sorted(unknown)}", field=sorted(unknown)[0])

        current = self.get_holding(holding_id)
        applied = {k: v for k, v in changes.items() if v is not None}
        updated = current.with_changes(**applied)
        self._validate(updated.symbol, updated.purchase_price, updated.quantity)

        holdings = [updated if h.id == holding_id else h for h in self._ensure_loaded()]
        self._replace(holdings)
        logger.info(f"Holding updated: {updated.symbol} ({holding_id})")
        return updated

    def delete_holding(self, holding_id: str) -> Holding:
        """
        Remove a holding.

        Raises:
            HoldingNotFoundError: Unknown id
        """
        removed = self.get_holding(holding_id)
        self._replace([h for h in self._ensure_loaded() if h.id != holding_id])
        logger.info(f"Holding deleted: {removed.symbol} ({holding_id})")
        return removed

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _ensure_loaded(self) -> list[Holding]:
        if self._holdings is None:
            records = load_slice(self._store, STATE_SLICE, [])
            loaded: list[Holding] = []
            needs_ids = False
            for record in records:
                try:
                    holding = Holding.from_record(record)
                except (KeyError, TypeError, ValueError, ArithmeticError) as e:
                    logger.warning(f"Skipping unreadable holding record {record!r}: {e}")
                    continue
                needs_ids = needs_ids or not record.get("id")
                loaded.append(holding)
            self._holdings = loaded
            if needs_ids:
                # Persist the ids generated for legacy records so they stay stable
                save_slice(self._store, STATE_SLICE, [h.to_record() for h in loaded])
            logger.debug(f"Loaded {len(loaded)} holdings")
        return self._holdings

    def _replace(self, holdings: list[Holding]) -> None:
        self._holdings = holdings
        save_slice(self._store, STATE_SLICE, [h.to_record() for h in holdings])

    @staticmethod
    def _validate(symbol: str, purchase_price: Decimal, quantity: Decimal) -> None:
        if not normalize_symbol(symbol):
            raise ValidationError("Symbol must not be blank", field="symbol")
        if purchase_price is None or purchase_price <= 0:
            raise InvalidAmountError(purchase_price, field="purchase_price")
        if quantity is None or quantity <= 0:
            raise InvalidAmountError(quantity, field="quantity")
