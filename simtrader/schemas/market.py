"""Pydantic schemas for public market data endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class StockPublic(BaseModel):
    """Public stock information."""

    id: int
    symbol: str
    company_name: str
    sector_id: int | None
    sector_name: str | None = None
    current_price: Decimal
    market_cap: int | None
    volume: int | None
    day_change: Decimal | None
    day_change_percent: Decimal | None
    pe_ratio: Decimal | None
    dividend_yield: Decimal | None
    year_high: Decimal | None
    year_low: Decimal | None
    last_updated: datetime

    model_config = {"from_attributes": True}


class StockListResponse(BaseModel):
    """Response for listing stocks."""

    stocks: list[StockPublic] = Field(default_factory=list)


class SectorPublic(BaseModel):
    """Public sector information."""

    id: int
    name: str
    description: str | None
    performance_ytd: Decimal | None

    model_config = {"from_attributes": True}


class SectorListResponse(BaseModel):
    sectors: list[SectorPublic] = Field(default_factory=list)
