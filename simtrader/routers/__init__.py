"""API routers."""

from simtrader.routers.admin import router as admin_router
from simtrader.routers.competitions import router as competitions_router
from simtrader.routers.market import router as market_router
from simtrader.routers.portfolio import router as portfolio_router
from simtrader.routers.recommendations import router as recommendations_router
from simtrader.routers.subscriptions import router as subscriptions_router
from simtrader.routers.trader import router as trader_router
from simtrader.routers.watchlist import router as watchlist_router

__all__ = [
    "admin_router",
    "competitions_router",
    "market_router",
    "portfolio_router",
    "recommendations_router",
    "subscriptions_router",
    "trader_router",
    "watchlist_router",
]
