"""Pydantic schemas for recommendation endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from simtrader.models import RecommendationType


class RecommendationResponse(BaseModel):
    """Response schema for a recommendation."""

    id: int
    stock_id: int
    symbol: str | None = None
    company_name: str | None = None
    current_price: Decimal | None = None
    sector_name: str | None = None
    recommendation_type: RecommendationType
    confidence_score: Decimal | None
    reason: str | None
    target_price: Decimal | None
    algorithm_used: str
    created_at: datetime
    expires_at: datetime | None

    model_config = {"from_attributes": True}


class RecommendationListResponse(BaseModel):
    recommendations: list[RecommendationResponse] = Field(default_factory=list)


class FollowResponse(BaseModel):
    """Response schema for following a recommendation."""

    stock_id: int
    watchlist_item_id: int
    added: bool = Field(..., description="False when the stock was already watched")
