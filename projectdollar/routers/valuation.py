# projectdollar/routers/valuation.py
"""
Portfolio valuation endpoints.

- GET /portfolio/valuation          - Totals and per-holding valuation
- GET /portfolio/history?period=    - Recorded totals aggregated for the chart

Every valuation request appends today's total to the value history.
"""

from fastapi import APIRouter, Depends, Query

from projectdollar.dependencies import get_holdings_service, get_valuation_service
from projectdollar.schemas.valuation import (
    AssetValuationResponse,
    ChartPointResponse,
    HistoryResponse,
    PortfolioValuationResponse,
)
from projectdollar.services.holdings_service import HoldingsService
from projectdollar.services.valuation import PortfolioSnapshot, ValuationService
from projectdollar.services.valuation.history_calculator import parse_period

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolio",
    tags=["Valuation"],
)


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_snapshot(snapshot: PortfolioSnapshot) -> PortfolioValuationResponse:
    return PortfolioValuationResponse(
        total_value_usd=snapshot.total_value_usd,
        total_value_eur=snapshot.total_value_eur,
        cost_basis_usd=snapshot.cost_basis_usd,
        total_gain_loss=snapshot.total_gain_loss,
        total_gain_loss_percent=snapshot.total_gain_loss_percent,
        exchange_rate=snapshot.exchange_rate,
        asset_count=snapshot.asset_count,
        has_complete_prices=snapshot.has_complete_prices,
        assets=[AssetValuationResponse.model_validate(a) for a in snapshot.assets],
        missing_prices=list(snapshot.missing_prices),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/valuation",
    response_model=PortfolioValuationResponse,
    summary="Value the portfolio",
)
async def get_valuation(
        holdings: HoldingsService = Depends(get_holdings_service),
        service: ValuationService = Depends(get_valuation_service),
) -> PortfolioValuationResponse:
    """
    Value all holdings at current prices.

    Holdings without a live price are valued at purchase price and listed
    in missing_prices.
    """
    snapshot = await service.get_snapshot(holdings.list_holdings())
    return _map_snapshot(snapshot)


@router.get(
    "/history",
    response_model=HistoryResponse,
    summary="Value history for the chart",
)
def get_history(
        period: str = Query(default="day", description="day, week, month or year"),
        service: ValuationService = Depends(get_valuation_service),
) -> HistoryResponse:
    """
    Aggregate recorded totals into the most recent buckets of `period`.

    Unknown periods answer 400.
    """
    parsed = parse_period(period)
    points = service.get_history(parsed)
    return HistoryResponse(
        period=parsed.value,
        points=[ChartPointResponse.model_validate(p) for p in points],
    )
