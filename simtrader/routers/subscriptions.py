"""Subscription endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.auth import get_current_account
from simtrader.database import get_session
from simtrader.errors import SimTraderError
from simtrader.models import Account
from simtrader.schemas.subscriptions import (
    CurrentSubscriptionResponse,
    SubscriptionHistoryResponse,
    SubscriptionResponse,
    SubscriptionUpgrade,
    TierResponse,
)
from simtrader.services import subscriptions as subscription_service

router = APIRouter()


@router.get(
    "/subscriptions/tiers",
    response_model=list[TierResponse],
    summary="List subscription tiers",
)
async def list_tiers() -> list[TierResponse]:
    return [
        TierResponse(name=t.name, price=t.price, features=list(t.features))
        for t in subscription_service.TIERS.values()
    ]


@router.get(
    "/subscriptions/current",
    response_model=CurrentSubscriptionResponse,
    summary="Get my subscription",
)
async def get_current_subscription(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> CurrentSubscriptionResponse:
    """Get your tier and active subscription (null on the free tier)."""
    current = await subscription_service.get_current_subscription(session, account.id)
    return CurrentSubscriptionResponse(
        subscription_tier=account.subscription_tier,
        subscription=SubscriptionResponse.model_validate(current) if current else None,
    )


@router.get(
    "/subscriptions/history",
    response_model=SubscriptionHistoryResponse,
    summary="Get my subscription history",
)
async def get_subscription_history(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> SubscriptionHistoryResponse:
    subscriptions = await subscription_service.get_subscription_history(
        session, account.id
    )
    return SubscriptionHistoryResponse(
        subscriptions=[SubscriptionResponse.model_validate(s) for s in subscriptions]
    )


@router.post(
    "/subscriptions/upgrade",
    response_model=SubscriptionResponse,
    summary="Change subscription tier",
)
async def upgrade_subscription(
    data: SubscriptionUpgrade,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> SubscriptionResponse:
    """Switch to a tier. Its price is paid from your cash balance."""
    try:
        subscription = await subscription_service.upgrade_subscription(
            session, account.id, data.tier_name, data.payment_method
        )
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return SubscriptionResponse.model_validate(subscription)


@router.post(
    "/subscriptions/cancel",
    response_model=SubscriptionResponse,
    summary="Cancel my subscription",
)
async def cancel_subscription(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> SubscriptionResponse:
    """Cancel the active subscription and return to the free tier."""
    try:
        subscription = await subscription_service.cancel_subscription(session, account.id)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return SubscriptionResponse.model_validate(subscription)
