"""Pydantic schemas for competition endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from simtrader.models import CompetitionStatus


class CompetitionResponse(BaseModel):
    """Response schema for a competition."""

    id: int
    name: str
    description: str | None
    start_date: datetime
    end_date: datetime
    initial_balance: Decimal
    entry_fee: Decimal
    prize_pool: Decimal | None
    max_participants: int | None
    status: CompetitionStatus

    model_config = {"from_attributes": True}


class CompetitionListResponse(BaseModel):
    competitions: list[CompetitionResponse] = Field(default_factory=list)


class ParticipationResponse(BaseModel):
    """Response schema for an account's entry in a competition."""

    competition_id: int
    competition_name: str | None = None
    competition_status: CompetitionStatus | None = None
    virtual_balance: Decimal
    current_portfolio_value: Decimal
    total_return: Decimal
    return_percentage: Decimal
    rank: int | None
    joined_at: datetime


class ParticipationListResponse(BaseModel):
    participations: list[ParticipationResponse] = Field(default_factory=list)


class LeaderboardEntryResponse(BaseModel):
    rank: int
    account_id: str
    username: str
    current_portfolio_value: Decimal
    total_return: Decimal
    return_percentage: Decimal

    model_config = {"from_attributes": True}


class LeaderboardResponse(BaseModel):
    competition_id: int
    entries: list[LeaderboardEntryResponse] = Field(default_factory=list)
