"""
Watchlist and price alert models.

Watchlist entries bookmark a stock for an account (one entry per stock).
Alerts fire once when the stock price crosses the target value.
"""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from simtrader.database import Base


class WatchlistItem(Base):
    """A stock on an account's watchlist."""

    __tablename__ = "watchlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), nullable=False
    )
    stock_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stocks.id"), nullable=False
    )
    alert_price_high: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    alert_price_low: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    added_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("account_id", "stock_id", name="uq_watchlist_account_stock"),
    )

    def __repr__(self) -> str:
        return f"WatchlistItem(account={self.account_id!r}, stock={self.stock_id})"


class AlertType(enum.Enum):
    """Which side of the target price triggers the alert."""

    PRICE_ABOVE = "PRICE_ABOVE"
    PRICE_BELOW = "PRICE_BELOW"


class StockAlert(Base):
    """A one-shot price alert."""

    __tablename__ = "stock_alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), nullable=False
    )
    stock_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stocks.id"), nullable=False
    )
    alert_type: Mapped[AlertType] = mapped_column(Enum(AlertType), nullable=False)
    target_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # An alert is active while it has not triggered
    is_triggered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    triggered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    @property
    def is_active(self) -> bool:
        return not self.is_triggered

    def __repr__(self) -> str:
        return (
            f"StockAlert(id={self.id}, stock={self.stock_id}, "
            f"{self.alert_type.value} {self.target_value})"
        )
