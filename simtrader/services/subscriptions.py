"""Subscription service - tier upgrades and cancellation.

Tiers are fixed; a paid upgrade is debited from the account's cash balance
and lasts SUBSCRIPTION_PERIOD.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import and_, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.errors import InsufficientFunds, NotFound, SimTraderError
from simtrader.models import Account, Subscription, SubscriptionStatus
from simtrader.services.trading import account_lock

logger = logging.getLogger(__name__)

SUBSCRIPTION_PERIOD = timedelta(days=30)
DEFAULT_TIER = "Free"


@dataclass(frozen=True)
class Tier:
    name: str
    price: Decimal
    features: tuple[str, ...]


TIERS: dict[str, Tier] = {
    tier.name: tier
    for tier in (
        Tier("Free", Decimal("0.00"), ("Basic trading", "Portfolio tracking", "Watchlist")),
        Tier(
            "Premium",
            Decimal("29.99"),
            ("Price alerts", "Recommendations", "Competitions", "Sector analytics"),
        ),
        Tier(
            "Pro",
            Decimal("59.99"),
            ("Everything in Premium", "Priority support", "Advanced analytics"),
        ),
    )
}


class UnknownTier(SimTraderError):
    def __init__(self, tier_name: str) -> None:
        super().__init__(f"Unknown subscription tier '{tier_name}'")


async def get_current_subscription(
    session: AsyncSession, account_id: str
) -> Subscription | None:
    """Get the account's active subscription, or None."""
    result = await session.execute(
        select(Subscription)
        .where(
            and_(
                Subscription.account_id == account_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
        )
        .order_by(desc(Subscription.start_date), desc(Subscription.id))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_subscription_history(
    session: AsyncSession, account_id: str
) -> list[Subscription]:
    """Get every subscription the account has had, newest first."""
    result = await session.execute(
        select(Subscription)
        .where(Subscription.account_id == account_id)
        .order_by(desc(Subscription.start_date), desc(Subscription.id))
    )
    return list(result.scalars().all())


async def upgrade_subscription(
    session: AsyncSession,
    account_id: str,
    tier_name: str,
    payment_method: str | None = None,
) -> Subscription:
    """Switch the account to a tier, paying its price.

    Any current subscription is deactivated first.

    Raises:
        UnknownTier: If the tier does not exist
        InsufficientFunds: If the balance does not cover the price
    """
    tier = TIERS.get(tier_name)
    if tier is None:
        raise UnknownTier(tier_name)

    async with account_lock(account_id):
        result = await session.execute(
            select(Account)
            .where(Account.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one()
        if tier.price > account.cash_balance:
            raise InsufficientFunds(tier.price, account.cash_balance)

        current = await get_current_subscription(session, account_id)
        if current is not None:
            current.status = SubscriptionStatus.INACTIVE

        now = datetime.now(UTC).replace(tzinfo=None)
        subscription = Subscription(
            account_id=account_id,
            tier_name=tier.name,
            start_date=now,
            end_date=now + SUBSCRIPTION_PERIOD,
            payment_amount=tier.price,
            payment_method=payment_method,
            auto_renewal=True,
            status=SubscriptionStatus.ACTIVE,
        )
        session.add(subscription)
        account.cash_balance -= tier.price
        account.subscription_tier = tier.name
        await session.commit()
        await session.refresh(subscription)

    logger.info(
        "Subscription upgraded",
        extra={"account_id": account_id, "tier": tier.name, "amount": float(tier.price)},
    )
    return subscription


async def cancel_subscription(session: AsyncSession, account_id: str) -> Subscription:
    """Deactivate the account's subscription and fall back to the free tier.

    Raises:
        NotFound: If the account has no active subscription
    """
    async with account_lock(account_id):
        current = await get_current_subscription(session, account_id)
        if current is None:
            raise NotFound("No active subscription found")

        current.status = SubscriptionStatus.INACTIVE
        current.auto_renewal = False

        result = await session.execute(
            select(Account)
            .where(Account.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one()
        account.subscription_tier = DEFAULT_TIER
        await session.commit()
        await session.refresh(current)

    logger.info("Subscription cancelled", extra={"account_id": account_id})
    return current
