# projectdollar/services/valuation/__init__.py
"""
Valuation Service Package.

This package provides portfolio valuation capabilities:
- Current snapshot against live prices (get_snapshot)
- Time series for charts (get_history)

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Data classes
    ├── calculators.py           # Point-in-time calculators, compute_snapshot
    ├── history_calculator.py    # TimeSeriesAggregator
    └── service.py               # ValuationService (orchestrator)

Data Flow:
    Holdings + Prices + Rate → compute_snapshot → PortfolioSnapshot
    PortfolioSnapshot.total_value_usd → ValueHistory
    ValueHistory → TimeSeriesAggregator → [ChartPoint]
"""

from projectdollar.services.valuation.calculators import (
    CostBasisCalculator,
    ValueCalculator,
    GainLossCalculator,
    compute_snapshot,
    value_holding,
)
from projectdollar.services.valuation.history_calculator import (
    TimeSeriesAggregator,
    parse_period,
)
from projectdollar.services.valuation.service import ValuationService
from projectdollar.services.valuation.types import (
    Holding,
    AssetValuation,
    PortfolioSnapshot,
    HistoryPoint,
    ChartPoint,
    Period,
    ValueHistory,
    quantize_money,
)

__all__ = [
    # Main service
    "ValuationService",

    # Data types
    "Holding",
    "AssetValuation",
    "PortfolioSnapshot",
    "HistoryPoint",
    "ChartPoint",
    "Period",
    "ValueHistory",
    "quantize_money",

    # Calculators
    "CostBasisCalculator",
    "ValueCalculator",
    "GainLossCalculator",
    "compute_snapshot",
    "value_holding",
    "TimeSeriesAggregator",
    "parse_period",
]
