"""Competition endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.auth import get_current_account
from simtrader.database import get_session
from simtrader.errors import SimTraderError
from simtrader.models import Account
from simtrader.schemas.competitions import (
    CompetitionListResponse,
    CompetitionResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    ParticipationListResponse,
    ParticipationResponse,
)
from simtrader.services import competitions as competition_service

router = APIRouter()


@router.get(
    "/competitions",
    response_model=CompetitionListResponse,
    summary="List competitions",
)
async def list_competitions(
    session: AsyncSession = Depends(get_session),
) -> CompetitionListResponse:
    """Get all trading competitions ordered by start date."""
    competitions = await competition_service.get_competitions(session)
    return CompetitionListResponse(
        competitions=[CompetitionResponse.model_validate(c) for c in competitions]
    )


@router.get(
    "/competitions/mine",
    response_model=ParticipationListResponse,
    summary="List my competitions",
)
async def my_competitions(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> ParticipationListResponse:
    rows = await competition_service.get_my_competitions(session, account.id)
    return ParticipationListResponse(
        participations=[
            ParticipationResponse(
                competition_id=p.competition_id,
                competition_name=c.name,
                competition_status=c.status,
                virtual_balance=p.virtual_balance,
                current_portfolio_value=p.current_portfolio_value,
                total_return=p.total_return,
                return_percentage=p.return_percentage,
                rank=p.rank,
                joined_at=p.joined_at,
            )
            for p, c in rows
        ]
    )


@router.post(
    "/competitions/{competition_id}/join",
    response_model=ParticipationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join a competition",
)
async def join_competition(
    competition_id: int,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> ParticipationResponse:
    """Enter a competition. The entry fee is paid from your cash balance."""
    try:
        p = await competition_service.join_competition(session, account.id, competition_id)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ParticipationResponse(
        competition_id=p.competition_id,
        virtual_balance=p.virtual_balance,
        current_portfolio_value=p.current_portfolio_value,
        total_return=p.total_return,
        return_percentage=p.return_percentage,
        rank=p.rank,
        joined_at=p.joined_at,
    )


@router.get(
    "/competitions/{competition_id}/leaderboard",
    response_model=LeaderboardResponse,
    summary="Get competition leaderboard",
)
async def get_leaderboard(
    competition_id: int,
    session: AsyncSession = Depends(get_session),
) -> LeaderboardResponse:
    """Get participants ranked by portfolio value."""
    try:
        entries = await competition_service.get_leaderboard(session, competition_id)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return LeaderboardResponse(
        competition_id=competition_id,
        entries=[LeaderboardEntryResponse.model_validate(e) for e in entries],
    )
