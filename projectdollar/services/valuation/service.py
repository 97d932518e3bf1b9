# projectdollar/services/valuation/service.py
"""
Valuation Service - orchestrator for portfolio valuation.

This is the single entry point for valuation operations:
- get_snapshot(): Current totals against live prices and the live rate
- get_history(): Recorded totals aggregated for charts

Design Principles:
- Dependency Injection: price and rate providers injected via constructor
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Composable: Uses compute_snapshot() and TimeSeriesAggregator

Usage:
    from projectdollar.services.valuation import ValuationService

    service = ValuationService(price_provider, fx_provider, ValueHistory())

    snapshot = await service.get_snapshot(holdings)
    chart = service.get_history("week")
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Callable, Sequence

from projectdollar.services.valuation.calculators import compute_snapshot
from projectdollar.services.valuation.history_calculator import TimeSeriesAggregator
from projectdollar.services.valuation.types import (
    ChartPoint,
    HistoryPoint,
    Holding,
    Period,
    PortfolioSnapshot,
    ValueHistory,
)

if TYPE_CHECKING:
    from projectdollar.services.fx_rate_service import ExchangeRateProvider
    from projectdollar.services.market_data import PriceProvider

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for portfolio valuation.

    Attributes:
        _price_provider: Latest prices (cache + fallback chain)
        _fx_provider: EUR/USD rate (cache + fallback constant)
        _history: Recorded totals, appended on every snapshot
        _aggregator: Buckets history for charts
        _today: Date source for history points
    """

    def __init__(
            self,
            price_provider: PriceProvider,
            fx_provider: ExchangeRateProvider,
            history: ValueHistory | None = None,
            aggregator: TimeSeriesAggregator | None = None,
            today: Callable[[], date] = date.today,
    ) -> None:
        self._price_provider = price_provider
        self._fx_provider = fx_provider
        self._history = history if history is not None else ValueHistory()
        self._aggregator = aggregator or TimeSeriesAggregator()
        self._today = today
        logger.info("ValuationService initialized")

    @property
    def history(self) -> ValueHistory:
        return self._history

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def get_snapshot(
            self,
            holdings: Sequence[Holding],
            record_history: bool = True,
    ) -> PortfolioSnapshot:
        """
        Value holdings at current prices.

        Steps:
            1. Batch-fetch prices for the distinct symbols
            2. Fetch the EUR/USD rate
            3. compute_snapshot()
            4. Append (today, total_value_usd) to the history

        Provider failures never surface here: missing prices fall back to
        purchase prices and a failed rate falls back to the constant.

        Args:
            holdings: Holdings to value
            record_history: Append the total to the value history

        Returns:
            PortfolioSnapshot
        """
        symbols = list(dict.fromkeys(h.symbol for h in holdings))
        prices = await self._price_provider.fetch_prices(symbols) if symbols else {}
        rate = await self._fx_provider.get_rate()

        snapshot = compute_snapshot(holdings, prices, rate)

        if record_history:
            self._history.append(HistoryPoint(date=self._today(), value=snapshot.total_value_usd))

        logger.info(
            f"Portfolio valued: {snapshot.asset_count} holdings, "
            f"total {snapshot.total_value_usd} USD / {snapshot.total_value_eur} EUR, "
            f"{len(snapshot.missing_prices)} without live price"
        )
        return snapshot

    def get_history(self, period: Period | str) -> list[ChartPoint]:
        """
        Aggregate recorded totals for the chart.

        Raises:
            InvalidPeriodError: Unknown period
        """
        return self._aggregator.aggregate(self._history.points(), period)
