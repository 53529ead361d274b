"""Portfolio API endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.auth import get_current_account
from simtrader.database import get_session
from simtrader.errors import SimTraderError
from simtrader.models import Account
from simtrader.schemas.portfolio import (
    HoldingWithPnLResponse,
    PortfolioHoldingsResponse,
    PortfolioSummaryResponse,
    SectorAllocationResponse,
)
from simtrader.services import portfolio as portfolio_service

router = APIRouter()


@router.get(
    "/portfolio",
    response_model=PortfolioHoldingsResponse,
    summary="Get holdings with P/L",
)
async def get_portfolio_holdings(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> PortfolioHoldingsResponse:
    """Get all your stock holdings with profit/loss for each.

    **What the numbers mean for each stock:**
    - **quantity_owned**: How many shares you own
    - **total_invested**: What the shares you still hold cost you
    - **average_buy_price**: What you paid per share on average
    - **current_value**: What your shares are worth now
    - **unrealized_gain_loss**: Profit or loss if you sold now
    """
    holdings = await portfolio_service.get_holdings_with_pnl(session, account.id)
    return PortfolioHoldingsResponse(
        holdings=[HoldingWithPnLResponse.model_validate(h) for h in holdings]
    )


@router.get(
    "/portfolio/holdings/{stock_id}",
    response_model=HoldingWithPnLResponse,
    summary="Get one holding",
)
async def get_portfolio_holding(
    stock_id: int,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> HoldingWithPnLResponse:
    """Get your position in a single stock."""
    holding = await portfolio_service.get_holding_with_pnl(session, account.id, stock_id)
    if holding is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Holding not found",
        )
    return HoldingWithPnLResponse.model_validate(holding)


@router.get(
    "/portfolio/summary",
    response_model=PortfolioSummaryResponse,
    summary="Get portfolio summary",
)
async def get_portfolio_summary(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> PortfolioSummaryResponse:
    """Get a summary of your portfolio.

    - **total_value**: What your stocks are worth right now
    - **total_invested**: How much you paid for the stocks you hold
    - **total_gain_loss**: Profit or loss if you sold everything now
    """
    try:
        summary = await portfolio_service.get_portfolio_summary(session, account.id)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return PortfolioSummaryResponse.model_validate(summary)


@router.get(
    "/portfolio/sector-allocation",
    response_model=list[SectorAllocationResponse],
    summary="Get sector allocation",
)
async def get_sector_allocation(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> list[SectorAllocationResponse]:
    """Get the market value of your holdings grouped by sector."""
    allocations = await portfolio_service.get_sector_allocation(session, account.id)
    return [SectorAllocationResponse.model_validate(a) for a in allocations]
