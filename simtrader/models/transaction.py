"""
Transaction model - the fill ledger.

Single source of truth for trade history. Transactions are append-only
(never modified or deleted); one row is written per executed order.
"""

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
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from simtrader.database import Base
from simtrader.models.order import OrderSide


class Transaction(Base):
    """An executed fill for one order."""

    __tablename__ = "transactions"

    # Primary key: unique transaction identifier
    id: Mapped[str] = mapped_column(String, primary_key=True)

    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), nullable=False
    )
    stock_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stocks.id"), nullable=False
    )

    # BUY or SELL, mirrors the order side
    transaction_type: Mapped[OrderSide] = mapped_column(Enum(OrderSide), nullable=False)

    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Execution price (the price at which the order filled)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # quantity * price
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    commission_fee: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0.00")
    )

    # The order that produced this fill
    order_id: Mapped[str] = mapped_column(
        String, ForeignKey("orders.id"), nullable=False, unique=True
    )

    # Profit/loss locked in by a SELL against the pre-trade average cost
    realized_gain_loss: Mapped[Decimal | None] = mapped_column(
        Numeric(15, 2), nullable=True
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    account: Mapped["Account"] = relationship(back_populates="transactions")
    stock: Mapped["Stock"] = relationship()
    order: Mapped["Order"] = relationship()

    # Database constraints
    __table_args__ = (
        CheckConstraint("price > 0", name="check_transaction_price_positive"),
        CheckConstraint("quantity > 0", name="check_transaction_quantity_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, {self.transaction_type.value} "
            f"{self.quantity} stock={self.stock_id} @ {self.price})"
        )


# Import at end to avoid circular imports
from simtrader.models.account import Account
from simtrader.models.order import Order
from simtrader.models.stock import Stock
