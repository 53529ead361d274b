"""Pydantic schemas for watchlist and alert endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from simtrader.models import AlertType


# ============================================================================
# Watchlist schemas
# ============================================================================


class WatchlistAdd(BaseModel):
    """Request schema for adding a stock to the watchlist."""

    stock_id: int
    alert_price_high: Decimal | None = Field(default=None, gt=0)
    alert_price_low: Decimal | None = Field(default=None, gt=0)
    notes: str | None = None


class WatchlistItemResponse(BaseModel):
    """Response schema for a watchlist entry."""

    id: int
    stock_id: int
    symbol: str
    company_name: str
    current_price: Decimal
    day_change: Decimal | None = None
    day_change_percent: Decimal | None = None
    alert_price_high: Decimal | None
    alert_price_low: Decimal | None
    notes: str | None
    added_date: datetime


class WatchlistResponse(BaseModel):
    items: list[WatchlistItemResponse] = Field(default_factory=list)


# ============================================================================
# Alert schemas
# ============================================================================


class AlertCreate(BaseModel):
    """Request schema for creating a price alert."""

    stock_id: int
    alert_type: AlertType = Field(..., description="PRICE_ABOVE or PRICE_BELOW")
    target_value: Decimal = Field(..., gt=0, description="Price that triggers the alert")
    message: str | None = None


class AlertResponse(BaseModel):
    """Response schema for a price alert."""

    id: int
    stock_id: int
    symbol: str | None = None
    company_name: str | None = None
    current_price: Decimal | None = None
    alert_type: AlertType
    target_value: Decimal
    message: str | None
    is_active: bool
    is_triggered: bool
    triggered_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class AlertListResponse(BaseModel):
    alerts: list[AlertResponse] = Field(default_factory=list)
