"""Watchlist and price alert endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.auth import get_current_account
from simtrader.database import get_session
from simtrader.errors import SimTraderError
from simtrader.models import Account
from simtrader.schemas.watchlist import (
    AlertCreate,
    AlertListResponse,
    AlertResponse,
    WatchlistAdd,
    WatchlistItemResponse,
    WatchlistResponse,
)
from simtrader.services import watchlist as watchlist_service

router = APIRouter()


# ============================================================================
# Watchlist endpoints
# ============================================================================


@router.get(
    "/watchlist",
    response_model=WatchlistResponse,
    summary="Get my watchlist",
)
async def get_watchlist(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> WatchlistResponse:
    """Get watched stocks with their latest prices, most recently added first."""
    entries = await watchlist_service.get_watchlist(session, account.id)
    return WatchlistResponse(
        items=[
            WatchlistItemResponse(
                id=e.item.id,
                stock_id=e.item.stock_id,
                symbol=e.symbol,
                company_name=e.company_name,
                current_price=e.current_price,
                day_change=e.day_change,
                day_change_percent=e.day_change_percent,
                alert_price_high=e.item.alert_price_high,
                alert_price_low=e.item.alert_price_low,
                notes=e.item.notes,
                added_date=e.item.added_date,
            )
            for e in entries
        ]
    )


@router.post(
    "/watchlist",
    status_code=status.HTTP_201_CREATED,
    summary="Add a stock to my watchlist",
)
async def add_to_watchlist(
    data: WatchlistAdd,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Start watching a stock."""
    try:
        item = await watchlist_service.add_to_watchlist(
            session,
            account.id,
            data.stock_id,
            alert_price_high=data.alert_price_high,
            alert_price_low=data.alert_price_low,
            notes=data.notes,
        )
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Stock added to watchlist", "id": item.id}


@router.delete(
    "/watchlist/{stock_id}",
    summary="Remove a stock from my watchlist",
)
async def remove_from_watchlist(
    stock_id: int,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Stop watching a stock."""
    try:
        await watchlist_service.remove_from_watchlist(session, account.id, stock_id)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Stock removed from watchlist"}


# ============================================================================
# Alert endpoints
# ============================================================================


@router.get(
    "/alerts",
    response_model=AlertListResponse,
    summary="List my price alerts",
)
async def list_alerts(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> AlertListResponse:
    """Get your alerts with the stock's current price, newest first."""
    entries = await watchlist_service.get_alerts(session, account.id)
    return AlertListResponse(
        alerts=[
            AlertResponse.model_validate(e.alert).model_copy(
                update={
                    "symbol": e.symbol,
                    "company_name": e.company_name,
                    "current_price": e.current_price,
                }
            )
            for e in entries
        ]
    )


@router.post(
    "/alerts",
    response_model=AlertResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a price alert",
)
async def create_alert(
    data: AlertCreate,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> AlertResponse:
    """Get alerted when a stock rises above or falls below a target price."""
    try:
        alert = await watchlist_service.create_alert(
            session,
            account.id,
            data.stock_id,
            data.alert_type,
            data.target_value,
            message=data.message,
        )
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return AlertResponse.model_validate(alert)


@router.delete(
    "/alerts/{alert_id}",
    summary="Delete a price alert",
)
async def delete_alert(
    alert_id: int,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> dict:
    try:
        await watchlist_service.delete_alert(session, account.id, alert_id)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"message": "Alert deleted"}


@router.post(
    "/alerts/{alert_id}/toggle",
    response_model=AlertResponse,
    summary="Activate or deactivate a price alert",
)
async def toggle_alert(
    alert_id: int,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> AlertResponse:
    try:
        alert = await watchlist_service.toggle_alert(session, account.id, alert_id)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return AlertResponse.model_validate(alert)
