# projectdollar/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application and its lifespan (tables, background refresh)
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projectdollar.config import settings
from projectdollar.database import check_database_health, init_db
from projectdollar.dependencies import (
    get_fx_provider,
    get_holdings_service,
    get_price_provider,
    get_quote_sources,
)
from projectdollar.middleware import CorrelationIdMiddleware
from projectdollar.routers import (
    balances_router,
    holdings_router,
    market_data_router,
    preferences_router,
    valuation_router,
)
from projectdollar.schemas.errors import ErrorDetail, ValidationErrorDetail
from projectdollar.services.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    PersistenceError,
    ServiceError,
    ValidationError,
)
from projectdollar.services.refresh import make_price_refresh, refresh_max_age, schedule_periodic
from projectdollar.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables and start the periodic price refresh.
    Shutdown: stop the refresh and close HTTP clients.
    """
    init_db()

    refresh = None
    if settings.enable_background_refresh:
        refresh = schedule_periodic(
            make_price_refresh(
                get_price_provider(),
                get_holdings_service().symbols,
                max_age=refresh_max_age(
                    settings.price_cache_ttl_seconds, settings.price_refresh_interval
                ),
            ),
            interval=settings.price_refresh_interval,
            name="price-refresh",
        )

    logger.info(f"{settings.app_name} started ({settings.environment})")
    try:
        yield
    finally:
        if refresh is not None:
            await refresh.stop()
        for source in get_quote_sources():
            await source.aclose()
        await get_fx_provider().aclose()
        logger.info(f"{settings.app_name} stopped")


# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Portfolio valuation and EUR/USD cash management API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last added = first executed
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service exceptions carry no HTTP knowledge; these handlers map them to
# status codes with the ErrorDetail body. Subclasses are matched before
# their bases.
# =============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors (400): bad amounts, currencies, periods."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(InsufficientBalanceError)
async def insufficient_balance_handler(
    request: Request, exc: InsufficientBalanceError
) -> JSONResponse:
    """Handle conversions larger than the balance (409)."""
    logger.warning(f"Insufficient balance: {exc}")
    return JSONResponse(
        status_code=409,
        content=ErrorDetail(
            error="InsufficientBalanceError",
            message=str(exc),
            details={
                "currency": exc.currency,
                "requested": str(exc.requested),
                "available": str(exc.available),
            },
        ).model_dump(),
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle unknown resources (404)."""
    logger.warning(f"Not found: {exc}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"resource_type": exc.resource_type, "resource_id": exc.resource_id},
        ).model_dump(),
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Handle state store failures (503)."""
    logger.error(f"Persistence error: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="PersistenceError",
            message=str(exc),
            details={"operation": exc.operation},
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert FastAPI's {"detail": "..."} body to ErrorDetail."""
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        409: "ConflictError",
        422: "ValidationError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_types.get(exc.status_code, "HTTPError"),
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert the default 422 body to ValidationErrorDetail."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(details=errors).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(holdings_router)  # /holdings/*
app.include_router(balances_router)  # /balances/*
app.include_router(valuation_router)  # /portfolio/*
app.include_router(market_data_router)  # /prices, /fx, /symbols
app.include_router(preferences_router)  # /preferences


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
def root():
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health status of the state database.

    Returns HTTP 503 when the database is unreachable. Price and rate
    sources are not checked: the app degrades to cached/purchase prices
    and the fallback rate without them.
    """
    database = check_database_health()
    body = {
        "status": database["status"],
        "checks": {"database": database},
    }
    if database["status"] != "healthy":
        return JSONResponse(status_code=503, content=body)
    return body
