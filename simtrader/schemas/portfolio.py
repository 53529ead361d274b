"""Pydantic schemas for portfolio endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class HoldingWithPnLResponse(BaseModel):
    """Response schema for a holding with P/L calculations."""

    stock_id: int
    symbol: str = Field(..., description="Stock ticker symbol")
    company_name: str
    sector_name: str | None
    quantity_owned: int = Field(..., description="Number of shares owned")
    average_buy_price: Decimal = Field(..., description="Average cost per share")
    total_invested: Decimal = Field(..., description="Cost basis of the shares held")
    current_price: Decimal = Field(..., description="Current market price")
    current_value: Decimal = Field(..., description="Current market value")
    unrealized_gain_loss: Decimal = Field(
        ..., description="Current value minus total invested"
    )
    unrealized_gain_loss_percent: Decimal
    first_purchase_date: datetime
    last_updated: datetime

    model_config = {"from_attributes": True}


class PortfolioHoldingsResponse(BaseModel):
    """Response for listing holdings with P/L."""

    holdings: list[HoldingWithPnLResponse] = Field(default_factory=list)


class PortfolioSummaryResponse(BaseModel):
    """Response schema for portfolio summary."""

    account_id: str = Field(..., description="Account identifier")
    cash_balance: Decimal = Field(..., description="Available cash")
    total_value: Decimal = Field(..., description="Total market value of holdings")
    total_invested: Decimal = Field(
        ..., description="Total amount invested in holdings"
    )
    total_gain_loss: Decimal = Field(..., description="Total unrealized profit/loss")
    total_gain_loss_percent: Decimal = Field(
        ..., description="Total unrealized P/L as percentage of invested"
    )
    holdings_count: int

    model_config = {"from_attributes": True}


class SectorAllocationResponse(BaseModel):
    """Market value held in one sector."""

    sector_name: str
    sector_value: Decimal
    stock_count: int

    model_config = {"from_attributes": True}
