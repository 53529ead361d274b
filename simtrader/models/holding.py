"""
Holding model - a portfolio position.

Represents how many shares of a stock an account owns and what it paid.
Uses a composite primary key (account_id, stock_id).

At rest total_invested == quantity_owned * average_buy_price (to the cent).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from simtrader.database import Base


class Holding(Base):
    """Share ownership record - links an account to shares of a stock."""

    __tablename__ = "holdings"

    # Composite primary key: account + stock
    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), primary_key=True
    )
    stock_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stocks.id"), primary_key=True
    )

    # Number of shares owned (must be positive)
    # When quantity reaches 0, the row is deleted
    quantity_owned: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Weighted-average cost per share, kept at 10 decimal places
    average_buy_price: Mapped[Decimal] = mapped_column(Numeric(20, 10), nullable=False)

    # Remaining cost basis of the position
    total_invested: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )

    first_purchase_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    account: Mapped["Account"] = relationship(back_populates="holdings")
    stock: Mapped["Stock"] = relationship()

    # Database constraints
    __table_args__ = (
        CheckConstraint("quantity_owned > 0", name="check_quantity_positive"),
        CheckConstraint("total_invested >= 0", name="check_invested_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"Holding(account={self.account_id!r}, stock={self.stock_id}, "
            f"quantity={self.quantity_owned}, invested={self.total_invested})"
        )


# Import at end to avoid circular imports
from simtrader.models.account import Account
from simtrader.models.stock import Stock
