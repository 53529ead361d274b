"""
Order model - every order request submitted by a trader.

There is no resting order book: orders are validated and executed in the
same request, so an order row moves PENDING -> EXECUTED inside a single
database transaction and is never updated again.
"""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from simtrader.database import Base


class OrderSide(enum.Enum):
    """Buy or sell."""

    BUY = "BUY"
    SELL = "SELL"


class OrderType(enum.Enum):
    """Order type determines the execution price."""

    LIMIT = "LIMIT"  # Execute at the submitted limit price
    MARKET = "MARKET"  # Execute at the stock's current price


class OrderStatus(enum.Enum):
    """Order lifecycle status."""

    PENDING = "PENDING"  # Recorded, not yet applied
    EXECUTED = "EXECUTED"  # Filled in full
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class Order(Base):
    """A buy or sell order."""

    __tablename__ = "orders"

    # Primary key: unique order identifier
    id: Mapped[str] = mapped_column(String, primary_key=True)

    # Who placed the order
    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), nullable=False
    )

    # What is being traded
    stock_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stocks.id"), nullable=False
    )

    # Buy or sell
    side: Mapped[OrderSide] = mapped_column(Enum(OrderSide), nullable=False)

    # Limit or market order
    order_type: Mapped[OrderType] = mapped_column(Enum(OrderType), nullable=False)

    # Number of shares
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Limit price (NULL for market orders)
    limit_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    # Order lifecycle status
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING
    )

    # Optional client-supplied idempotency key
    client_order_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    order_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    execution_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Relationships
    account: Mapped["Account"] = relationship(back_populates="orders")
    stock: Mapped["Stock"] = relationship()

    # Database constraints
    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_order_quantity_positive"),
        # Price must be positive for LIMIT orders, can be NULL for MARKET
        CheckConstraint(
            "limit_price > 0 OR order_type = 'MARKET'",
            name="check_price_positive_for_limit",
        ),
        UniqueConstraint("account_id", "client_order_id", name="uq_order_client_order_id"),
    )

    def __repr__(self) -> str:
        return (
            f"Order(id={self.id!r}, {self.side.value} {self.quantity} stock={self.stock_id} "
            f"@ {self.limit_price}, status={self.status.value})"
        )


# Import at end to avoid circular imports
from simtrader.models.account import Account
from simtrader.models.stock import Stock
