"""
Stock and sector models - the tradeable instruments.

Prices are maintained by the admin price feed; trading reads
current_price but never writes it.
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
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from simtrader.database import Base


class Sector(Base):
    """A market sector grouping stocks (e.g., "Technology")."""

    __tablename__ = "sectors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Year-to-date sector performance in percent
    performance_ytd: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    stocks: Mapped[list["Stock"]] = relationship(back_populates="sector")

    def __repr__(self) -> str:
        return f"Sector(id={self.id}, name={self.name!r})"


class Stock(Base):
    """A listed stock with its latest market data."""

    __tablename__ = "stocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Unique ticker symbol (e.g., "AAPL")
    symbol: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    company_name: Mapped[str] = mapped_column(String(100), nullable=False)

    sector_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("sectors.id"), nullable=True
    )

    # Latest price - the execution price for MARKET orders
    current_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Display metadata
    market_cap: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    volume: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    day_change: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    day_change_percent: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    pe_ratio: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    dividend_yield: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    year_high: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    year_low: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    last_updated: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    sector: Mapped["Sector"] = relationship(back_populates="stocks")

    __table_args__ = (
        CheckConstraint("current_price > 0", name="check_stock_price_positive"),
    )

    def __repr__(self) -> str:
        return f"Stock(id={self.id}, symbol={self.symbol!r}, price={self.current_price})"
