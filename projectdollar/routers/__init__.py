# projectdollar/routers/__init__.py
"""
API routers for ProjectDollar.

Each router handles a specific domain:
- holdings: Holding CRUD
- balances: Cash balances, deposits and USD/EUR conversion
- valuation: Portfolio valuation and value history
- market_data: Prices, EUR/USD rate and symbol lookup
- preferences: Opaque user preferences
"""

from projectdollar.routers.balances import router as balances_router
from projectdollar.routers.holdings import router as holdings_router
from projectdollar.routers.market_data import router as market_data_router
from projectdollar.routers.preferences import router as preferences_router
from projectdollar.routers.valuation import router as valuation_router

__all__ = [
    "holdings_router",
    "balances_router",
    "valuation_router",
    "market_data_router",
    "preferences_router",
]
