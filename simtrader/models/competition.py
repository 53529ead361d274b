"""
Trading competition models.

A competition runs between start_date and end_date; participants compete
on current_portfolio_value, starting from the competition's initial balance.
"""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
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


class CompetitionStatus(enum.Enum):
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class Competition(Base):
    """A trading competition."""

    __tablename__ = "trading_competitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    initial_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("100000.00")
    )
    entry_fee: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0.00")
    )
    prize_pool: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)

    # NULL means unlimited
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[CompetitionStatus] = mapped_column(
        Enum(CompetitionStatus), nullable=False, default=CompetitionStatus.UPCOMING
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"Competition(id={self.id}, name={self.name!r}, status={self.status.value})"


class CompetitionParticipant(Base):
    """An account's entry in a competition."""

    __tablename__ = "competition_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("trading_competitions.id"), nullable=False
    )
    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), nullable=False
    )
    virtual_balance: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    current_portfolio_value: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    total_return: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    return_percentage: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0.00")
    )
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("competition_id", "account_id", name="uq_participant_once"),
    )

    def __repr__(self) -> str:
        return (
            f"CompetitionParticipant(competition={self.competition_id}, "
            f"account={self.account_id!r}, rank={self.rank})"
        )
