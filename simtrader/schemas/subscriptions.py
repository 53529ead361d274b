"""Pydantic schemas for subscription endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from simtrader.models import SubscriptionStatus


class TierResponse(BaseModel):
    name: str
    price: Decimal
    features: list[str]


class SubscriptionUpgrade(BaseModel):
    """Request schema for changing tier."""

    tier_name: str = Field(..., description="Free, Premium or Pro")
    payment_method: str | None = Field(default=None, max_length=50)


class SubscriptionResponse(BaseModel):
    """Response schema for a subscription period."""

    id: int
    tier_name: str
    start_date: datetime
    end_date: datetime
    payment_amount: Decimal
    payment_method: str | None
    auto_renewal: bool
    status: SubscriptionStatus

    model_config = {"from_attributes": True}


class CurrentSubscriptionResponse(BaseModel):
    """The account's tier and its active subscription, if any."""

    subscription_tier: str
    subscription: SubscriptionResponse | None = None


class SubscriptionHistoryResponse(BaseModel):
    subscriptions: list[SubscriptionResponse] = Field(default_factory=list)
