"""
FastAPI application entry point.

Run with: uvicorn simtrader.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from simtrader import telemetry
from simtrader._version import VERSION
from simtrader.database import init_db

# Import models to ensure they're registered with SQLAlchemy
import simtrader.models  # noqa: F401
from simtrader.routers import (
    admin_router,
    competitions_router,
    market_router,
    portfolio_router,
    recommendations_router,
    subscriptions_router,
    trader_router,
    watchlist_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Startup: Create database tables if they don't exist, initialize telemetry.
    """
    await init_db()
    logger.info("Database initialized")

    if telemetry.setup_telemetry():
        # Attach OTLP handler to root logger for log export
        handler = telemetry.get_log_handler()
        if handler:
            logging.getLogger().addHandler(handler)
            logging.getLogger().setLevel(logging.INFO)
        telemetry.setup_portfolio_metrics()
        logger.info("Telemetry initialized (OTLP metrics + logs enabled)")
    else:
        logger.info("Telemetry disabled")

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="SimTrader API",
    description="Simulated stock trading with portfolio accounting",
    version=VERSION,
    lifespan=lifespan,
)


# Admin routes stay at /admin (no API versioning for admin)
app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(market_router, prefix="/api/v1", tags=["market"])
app.include_router(trader_router, prefix="/api/v1", tags=["trader"])
app.include_router(portfolio_router, prefix="/api/v1", tags=["portfolio"])
app.include_router(watchlist_router, prefix="/api/v1", tags=["watchlist"])
app.include_router(recommendations_router, prefix="/api/v1", tags=["recommendations"])
app.include_router(competitions_router, prefix="/api/v1", tags=["competitions"])
app.include_router(subscriptions_router, prefix="/api/v1", tags=["subscriptions"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/version")
async def get_version():
    """Get API version information."""
    return {
        "version": VERSION,
        "api_version": "v1",
    }
