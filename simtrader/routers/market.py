"""Public market data endpoints - no authentication required."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.database import get_session
from simtrader.models import Stock
from simtrader.schemas.market import (
    SectorListResponse,
    SectorPublic,
    StockListResponse,
    StockPublic,
)
from simtrader.services import market as market_service

router = APIRouter()


def _stock_public(stock: Stock, sector_name: str | None) -> StockPublic:
    return StockPublic.model_validate(stock).model_copy(update={"sector_name": sector_name})


@router.get(
    "/stocks",
    response_model=StockListResponse,
    summary="List all stocks",
)
async def list_stocks(
    session: AsyncSession = Depends(get_session),
) -> StockListResponse:
    """Get all listed stocks with their sector, ordered by symbol."""
    rows = await market_service.get_stocks(session)
    return StockListResponse(stocks=[_stock_public(s, sector) for s, sector in rows])


@router.get(
    "/stocks/{symbol}",
    response_model=StockPublic,
    summary="Get stock details",
)
async def get_stock(
    symbol: str,
    session: AsyncSession = Depends(get_session),
) -> StockPublic:
    """Get market data for a single stock."""
    row = await market_service.get_stock_by_symbol(session, symbol)
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Stock '{symbol.upper()}' not found",
        )
    return _stock_public(*row)


@router.get(
    "/sectors",
    response_model=SectorListResponse,
    summary="List all sectors",
)
async def list_sectors(
    session: AsyncSession = Depends(get_session),
) -> SectorListResponse:
    """Get all market sectors ordered by name."""
    sectors = await market_service.get_sectors(session)
    return SectorListResponse(sectors=[SectorPublic.model_validate(s) for s in sectors])
