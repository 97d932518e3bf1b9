# projectdollar/routers/holdings.py
"""
Holding management endpoints.

Provides CRUD operations over the user's holdings:
- GET    /holdings        - List holdings in insertion order
- POST   /holdings        - Add a holding
- GET    /holdings/{id}   - Fetch one holding
- PATCH  /holdings/{id}   - Edit fields (total_value is re-snapshotted)
- DELETE /holdings/{id}   - Remove a holding

Holdings are addressed by their generated id, never by list position.
Unknown ids reach the client as 404 through the global handler.
"""

from fastapi import APIRouter, Depends, status

from projectdollar.dependencies import get_holdings_service
from projectdollar.schemas.holdings import HoldingCreate, HoldingResponse, HoldingUpdate
from projectdollar.services.holdings_service import HoldingsService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/holdings",
    tags=["Holdings"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=list[HoldingResponse],
    summary="List holdings",
)
def list_holdings(
        service: HoldingsService = Depends(get_holdings_service),
) -> list[HoldingResponse]:
    return [HoldingResponse.model_validate(h) for h in service.list_holdings()]


@router.post(
    "",
    response_model=HoldingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a holding",
)
def create_holding(
        payload: HoldingCreate,
        service: HoldingsService = Depends(get_holdings_service),
) -> HoldingResponse:
    """
    Add a holding.

    The symbol is normalized to upper case and total_value is computed as
    purchase_price × quantity.
    """
    holding = service.add_holding(
        symbol=payload.symbol,
        name=payload.name,
        purchase_price=payload.purchase_price,
        quantity=payload.quantity,
        purchase_date=payload.purchase_date,
        logo_url=payload.logo_url,
    )
    return HoldingResponse.model_validate(holding)


@router.get(
    "/{holding_id}",
    response_model=HoldingResponse,
    summary="Get a holding",
)
def get_holding(
        holding_id: str,
        service: HoldingsService = Depends(get_holdings_service),
) -> HoldingResponse:
    return HoldingResponse.model_validate(service.get_holding(holding_id))


@router.patch(
    "/{holding_id}",
    response_model=HoldingResponse,
    summary="Edit a holding",
)
def update_holding(
        holding_id: str,
        payload: HoldingUpdate,
        service: HoldingsService = Depends(get_holdings_service),
) -> HoldingResponse:
    """Only fields present in the request body are changed."""
    changes = payload.model_dump(exclude_unset=True)
    holding = service.update_holding(holding_id, **changes)
    return HoldingResponse.model_validate(holding)


@router.delete(
    "/{holding_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a holding",
)
def delete_holding(
        holding_id: str,
        service: HoldingsService = Depends(get_holdings_service),
) -> None:
    service.delete_holding(holding_id)
