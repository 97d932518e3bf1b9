# projectdollar/routers/market_data.py
"""
Market data endpoints.

- GET /prices/{symbol}      - Latest price through the source chain
- GET /fx/eur-usd           - EUR/USD rate in use (live, cache or fallback)
- GET /symbols/lookup?q=    - Display name for a ticker

None of these fail on provider outages: an unknown price is reported as
null with the attempts made, and the rate falls back to the constant.
"""

from fastapi import APIRouter, Depends, Query

from projectdollar.dependencies import (
    get_fx_provider,
    get_price_provider,
    get_symbol_lookup_service,
)
from projectdollar.schemas.market_data import (
    ExchangeRateResponse,
    PriceResponse,
    QuoteAttemptResponse,
    SymbolMatchResponse,
)
from projectdollar.services.fx_rate_service import ExchangeRateProvider
from projectdollar.services.market_data import PriceProvider
from projectdollar.services.symbol_lookup import SymbolLookupService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(tags=["Market Data"])


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/prices/{symbol}", response_model=PriceResponse, summary="Get a price")
async def get_price(
        symbol: str,
        refresh: bool = Query(default=False, description="Bypass the price cache"),
        provider: PriceProvider = Depends(get_price_provider),
) -> PriceResponse:
    resolution = await provider.resolve(symbol, max_age=0 if refresh else None)
    return PriceResponse(
        symbol=resolution.symbol,
        price=resolution.price,
        source=resolution.source,
        attempts=[
            QuoteAttemptResponse(
                source=a.source,
                status=a.status.value,
                price=a.price,
                reason=a.reason,
            )
            for a in resolution.attempts
        ],
    )


@router.get("/fx/eur-usd", response_model=ExchangeRateResponse, summary="Get the EUR/USD rate")
async def get_exchange_rate(
        provider: ExchangeRateProvider = Depends(get_fx_provider),
) -> ExchangeRateResponse:
    info = await provider.get_rate_info()
    return ExchangeRateResponse(rate=info.rate, source=info.source, fetched_at=info.fetched_at)


@router.get(
    "/symbols/lookup",
    response_model=list[SymbolMatchResponse],
    summary="Look up a ticker's name",
)
async def lookup_symbol(
        q: str = Query(..., max_length=20, description="Ticker to look up"),
        service: SymbolLookupService = Depends(get_symbol_lookup_service),
) -> list[SymbolMatchResponse]:
    matches = await service.lookup(q)
    return [SymbolMatchResponse.model_validate(m) for m in matches]
