"""Subscription model - paid tier history per account."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from simtrader.database import Base


class SubscriptionStatus(enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Subscription(Base):
    """One subscription period. At most one per account is ACTIVE."""

    __tablename__ = "user_subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), nullable=False
    )
    tier_name: Mapped[str] = mapped_column(String(10), nullable=False)
    start_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    payment_amount: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    auto_renewal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[SubscriptionStatus] = mapped_column(
        Enum(SubscriptionStatus), nullable=False, default=SubscriptionStatus.ACTIVE
    )

    def __repr__(self) -> str:
        return (
            f"Subscription(id={self.id}, account={self.account_id!r}, "
            f"tier={self.tier_name!r}, status={self.status.value})"
        )
