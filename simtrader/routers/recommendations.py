"""Recommendation endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.auth import get_current_account
from simtrader.database import get_session
from simtrader.errors import SimTraderError
from simtrader.models import Account
from simtrader.schemas.recommendations import (
    FollowResponse,
    RecommendationListResponse,
    RecommendationResponse,
)
from simtrader.services import recommendations as recommendation_service

router = APIRouter()


@router.get(
    "/recommendations",
    response_model=RecommendationListResponse,
    summary="List recommendations",
)
async def list_recommendations(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> RecommendationListResponse:
    """Get analyst recommendations, newest first."""
    entries = await recommendation_service.get_recommendations(session)
    return RecommendationListResponse(
        recommendations=[
            RecommendationResponse.model_validate(e.recommendation).model_copy(
                update={
                    "symbol": e.symbol,
                    "company_name": e.company_name,
                    "current_price": e.current_price,
                    "sector_name": e.sector_name,
                }
            )
            for e in entries
        ]
    )


@router.post(
    "/recommendations/{recommendation_id}/follow",
    response_model=FollowResponse,
    summary="Follow a recommendation",
)
async def follow_recommendation(
    recommendation_id: int,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> FollowResponse:
    """Add the recommended stock to your watchlist."""
    try:
        item, added = await recommendation_service.follow_recommendation(
            session, account.id, recommendation_id
        )
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return FollowResponse(stock_id=item.stock_id, watchlist_item_id=item.id, added=added)
