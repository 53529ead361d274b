"""Recommendation service - list and follow analyst recommendations."""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.errors import NotFound
from simtrader.models import Recommendation, Sector, Stock, WatchlistItem
from simtrader.services import watchlist as watchlist_service


@dataclass
class RecommendationEntry:
    recommendation: Recommendation
    symbol: str
    company_name: str
    current_price: Decimal
    sector_name: str


async def get_recommendations(session: AsyncSession) -> list[RecommendationEntry]:
    """Get all recommendations, newest first.

    Stocks without a sector are reported under "Other".
    """
    result = await session.execute(
        select(Recommendation, Stock, Sector.name)
        .join(Stock, Recommendation.stock_id == Stock.id)
        .outerjoin(Sector, Stock.sector_id == Sector.id)
        .order_by(desc(Recommendation.created_at), desc(Recommendation.id))
    )
    return [
        RecommendationEntry(
            recommendation=rec,
            symbol=stock.symbol,
            company_name=stock.company_name,
            current_price=stock.current_price,
            sector_name=sector_name or "Other",
        )
        for rec, stock, sector_name in result.all()
    ]


async def follow_recommendation(
    session: AsyncSession, account_id: str, recommendation_id: int
) -> tuple[WatchlistItem, bool]:
    """Put the recommended stock on the account's watchlist.

    Following a recommendation for a stock that is already watched leaves
    the existing entry untouched.

    Returns:
        Tuple of (watchlist item, whether it was created)

    Raises:
        NotFound: If the recommendation does not exist
    """
    result = await session.execute(
        select(Recommendation).where(Recommendation.id == recommendation_id)
    )
    recommendation = result.scalar_one_or_none()
    if recommendation is None:
        raise NotFound(f"Recommendation '{recommendation_id}' not found")

    existing = await watchlist_service.get_watchlist_item(
        session, account_id, recommendation.stock_id
    )
    if existing is not None:
        return existing, False

    item = await watchlist_service.add_to_watchlist(
        session,
        account_id,
        recommendation.stock_id,
        notes=f"From recommendation: {recommendation.algorithm_used}",
    )
    return item, True
