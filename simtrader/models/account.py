"""
Account model - represents a registered trader.

Accounts hold virtual cash and place orders against it:
- Cash balance cannot go negative (no margin/credit)
- Cash only moves through order execution, competition entry fees
  and subscription payments
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from simtrader.database import Base


class Account(Base):
    """A trader account in the simulator."""

    __tablename__ = "accounts"

    # Primary key: unique account identifier
    id: Mapped[str] = mapped_column(String, primary_key=True)

    # API key hash for authentication (SHA-256 hash of the API key)
    api_key_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    # Profile
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    risk_tolerance: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Available cash for trading
    # Numeric(15,2) allows up to 9,999,999,999,999.99
    cash_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )

    # Current subscription tier name (Free, Premium, Pro)
    subscription_tier: Mapped[str] = mapped_column(
        String(10), nullable=False, default="Free"
    )

    # Account creation timestamp
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    holdings: Mapped[list["Holding"]] = relationship(back_populates="account")
    orders: Mapped[list["Order"]] = relationship(back_populates="account")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="account")

    # Database constraints
    __table_args__ = (
        CheckConstraint("cash_balance >= 0", name="check_cash_non_negative"),
    )

    def __repr__(self) -> str:
        return f"Account(id={self.id!r}, cash_balance={self.cash_balance})"


# Import at end to avoid circular imports
from simtrader.models.holding import Holding
from simtrader.models.order import Order
from simtrader.models.transaction import Transaction
