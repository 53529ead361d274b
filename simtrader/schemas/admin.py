"""Pydantic schemas for admin endpoints."""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from simtrader.models import CompetitionStatus, RecommendationType


class AccountCreate(BaseModel):
    """Request schema for creating an account."""

    account_id: str = Field(..., min_length=1, max_length=255, description="Unique account ID")
    username: str = Field(..., min_length=1, max_length=50, description="Unique username")
    email: str = Field(..., min_length=3, max_length=100, description="Unique email")
    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    risk_tolerance: str | None = Field(
        default=None, max_length=20, description="e.g. Conservative, Moderate, Aggressive"
    )
    initial_cash: Decimal | None = Field(
        default=None,
        ge=0,
        description="Initial cash balance (defaults to STARTING_BALANCE)",
    )


class AccountResponse(BaseModel):
    """Response schema for newly created account (includes API key)."""

    account_id: str
    username: str
    email: str
    cash_balance: Decimal
    api_key: str
    created_at: datetime


class AccountListItem(BaseModel):
    """Response schema for account in list view."""

    account_id: str
    username: str
    email: str
    cash_balance: Decimal
    subscription_tier: str
    created_at: datetime


class SectorCreate(BaseModel):
    """Request schema for creating a sector."""

    name: str = Field(..., min_length=1, max_length=50)
    description: str | None = None
    performance_ytd: Decimal | None = None


class StockCreate(BaseModel):
    """Request schema for listing a stock."""

    symbol: str = Field(..., min_length=1, max_length=10, description="Unique ticker symbol")
    company_name: str = Field(..., min_length=1, max_length=100)
    sector_id: int | None = None
    current_price: Decimal = Field(..., gt=0, decimal_places=2)
    market_cap: int | None = Field(default=None, ge=0)
    volume: int | None = Field(default=None, ge=0)
    pe_ratio: Decimal | None = None
    dividend_yield: Decimal | None = None
    year_high: Decimal | None = None
    year_low: Decimal | None = None

    @field_validator("symbol")
    @classmethod
    def symbol_uppercase(cls, v: str) -> str:
        return v.upper()


class PriceUpdate(BaseModel):
    """Request schema for setting a stock's price."""

    price: Decimal = Field(..., gt=0, decimal_places=2, description="New current price")


class PriceUpdateResponse(BaseModel):
    """Response schema for a price update."""

    stock_id: int
    symbol: str
    current_price: Decimal
    day_change: Decimal | None
    day_change_percent: Decimal | None
    alerts_triggered: int


class RecommendationCreate(BaseModel):
    """Request schema for publishing a recommendation."""

    stock_id: int
    recommendation_type: RecommendationType
    confidence_score: Decimal | None = Field(default=None, ge=0, le=1)
    reason: str | None = None
    target_price: Decimal | None = Field(default=None, gt=0)
    algorithm_used: str = Field(default="AI Analysis", max_length=50)
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def naive_utc(cls, v: datetime | None) -> datetime | None:
        return _naive_utc(v)


class CompetitionCreate(BaseModel):
    """Request schema for creating a competition."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    start_date: datetime
    end_date: datetime
    initial_balance: Decimal = Field(default=Decimal("100000.00"), gt=0)
    entry_fee: Decimal = Field(default=Decimal("0.00"), ge=0)
    prize_pool: Decimal | None = Field(default=None, ge=0)
    max_participants: int | None = Field(default=None, gt=0)
    status: CompetitionStatus = CompetitionStatus.UPCOMING

    @field_validator("start_date", "end_date")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        return _naive_utc(v)

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, v: datetime, info) -> datetime:
        """Validate that the competition ends after it starts."""
        start = info.data.get("start_date")
        if start is not None and v <= start:
            raise ValueError("end_date must be after start_date")
        return v


class SampleDataResponse(BaseModel):
    """Response schema for sample data initialization."""

    sectors_created: int
    stocks_created: int


def _naive_utc(v: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC."""
    if v is not None and v.tzinfo is not None:
        return v.astimezone(UTC).replace(tzinfo=None)
    return v
