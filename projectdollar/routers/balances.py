# projectdollar/routers/balances.py
"""
Cash balance endpoints.

- GET  /balances           - Current USD and EUR balances
- POST /balances/deposit   - Add money to one balance
- POST /balances/convert   - Move money between USD and EUR

Error mapping (global handlers):
- Unsupported currency → 400
- Insufficient balance → 409
- Non-positive amounts are rejected by the schemas → 422
"""

from fastapi import APIRouter, Depends

from projectdollar.dependencies import get_balance_service
from projectdollar.schemas.balances import (
    BalancesResponse,
    ConversionResponse,
    ConvertRequest,
    DepositEntryResponse,
    DepositRequest,
    DepositResponse,
)
from projectdollar.services.balances_service import BalanceService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/balances",
    tags=["Balances"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=BalancesResponse, summary="Get balances")
def get_balances(
        service: BalanceService = Depends(get_balance_service),
) -> BalancesResponse:
    return BalancesResponse.model_validate(service.get_balances())


@router.post("/deposit", response_model=DepositResponse, summary="Deposit money")
def deposit(
        payload: DepositRequest,
        service: BalanceService = Depends(get_balance_service),
) -> DepositResponse:
    balances = service.deposit(payload.currency, payload.amount, payload.date)
    return DepositResponse(
        balances=BalancesResponse.model_validate(balances),
        history=[DepositEntryResponse.model_validate(e) for e in service.deposit_history()],
    )


@router.post("/convert", response_model=ConversionResponse, summary="Convert between USD and EUR")
async def convert(
        payload: ConvertRequest,
        service: BalanceService = Depends(get_balance_service),
) -> ConversionResponse:
    """
    Convert an amount from one currency to the other.

    Uses custom_rate when given, otherwise the live EUR/USD rate (or the
    fallback rate when the rate source is down).
    """
    result = await service.convert(payload.from_currency, payload.amount, payload.custom_rate)
    return ConversionResponse(
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        amount=result.amount,
        converted_amount=result.converted_amount,
        rate=result.rate,
        rate_source=result.rate_source,
        rate_display=service.describe_rate(result.from_currency, result.rate),
        balances=BalancesResponse.model_validate(result.balances),
    )
