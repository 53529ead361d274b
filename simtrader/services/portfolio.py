"""Portfolio service - holdings valuation, summary and sector allocation.

Pure read-side aggregation over the account's holdings joined with the
stocks' current prices. Nothing here writes to the database.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader import telemetry
from simtrader.errors import AccountNotFound
from simtrader.models import Account, Holding, Sector, Stock
from simtrader.services.trading import to_money

ZERO = Decimal("0.00")


@dataclass
class HoldingWithPnL:
    """A holding with current value and profit/loss calculations."""

    stock_id: int
    symbol: str
    company_name: str
    sector_name: str | None
    quantity_owned: int
    average_buy_price: Decimal
    total_invested: Decimal
    current_price: Decimal
    first_purchase_date: datetime
    last_updated: datetime

    @property
    def current_value(self) -> Decimal:
        return to_money(self.current_price * self.quantity_owned)

    @property
    def unrealized_gain_loss(self) -> Decimal:
        return self.current_value - self.total_invested

    @property
    def unrealized_gain_loss_percent(self) -> Decimal:
        if self.total_invested <= 0:
            return ZERO
        return to_money(self.unrealized_gain_loss / self.total_invested * 100)


@dataclass
class PortfolioSummary:
    """Summary of an account's portfolio."""

    account_id: str
    cash_balance: Decimal
    total_value: Decimal  # market value of holdings
    total_invested: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    holdings_count: int


@dataclass
class SectorAllocation:
    """Market value held in one sector."""

    sector_name: str
    sector_value: Decimal
    stock_count: int


def _holding_query(account_id: str):
    return (
        select(Holding, Stock, Sector.name)
        .join(Stock, Holding.stock_id == Stock.id)
        .outerjoin(Sector, Stock.sector_id == Sector.id)
        .where(Holding.account_id == account_id)
    )


def _to_view(holding: Holding, stock: Stock, sector_name: str | None) -> HoldingWithPnL:
    return HoldingWithPnL(
        stock_id=stock.id,
        symbol=stock.symbol,
        company_name=stock.company_name,
        sector_name=sector_name,
        quantity_owned=holding.quantity_owned,
        average_buy_price=holding.average_buy_price,
        total_invested=holding.total_invested,
        current_price=stock.current_price,
        first_purchase_date=holding.first_purchase_date,
        last_updated=holding.last_updated,
    )


async def get_holdings_with_pnl(
    session: AsyncSession, account_id: str
) -> list[HoldingWithPnL]:
    """Get all holdings for an account with P/L calculations.

    Args:
        session: Database session
        account_id: Account ID

    Returns:
        Holdings ordered by amount invested, largest first
    """
    result = await session.execute(
        _holding_query(account_id).order_by(desc(Holding.total_invested))
    )
    return [_to_view(h, s, sector) for h, s, sector in result.all()]


async def get_holding_with_pnl(
    session: AsyncSession, account_id: str, stock_id: int
) -> HoldingWithPnL | None:
    """Get one holding with P/L, or None if the account owns no shares."""
    result = await session.execute(
        _holding_query(account_id).where(Holding.stock_id == stock_id)
    )
    row = result.one_or_none()
    if row is None:
        return None
    return _to_view(*row)


async def get_portfolio_summary(
    session: AsyncSession, account_id: str
) -> PortfolioSummary:
    """Get portfolio totals for an account.

    An account without holdings gets zeros rather than an error.

    Args:
        session: Database session
        account_id: Account ID

    Returns:
        Portfolio summary

    Raises:
        AccountNotFound: If the account does not exist
    """
    result = await session.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFound(account_id)

    holdings = await get_holdings_with_pnl(session, account_id)

    total_value = sum((h.current_value for h in holdings), ZERO)
    total_invested = sum((h.total_invested for h in holdings), ZERO)
    total_gain_loss = total_value - total_invested
    if total_invested > 0:
        total_gain_loss_percent = to_money(total_gain_loss / total_invested * 100)
    else:
        total_gain_loss_percent = ZERO

    telemetry.record_portfolio_value(
        account_id, float(total_value), float(total_gain_loss)
    )

    return PortfolioSummary(
        account_id=account_id,
        cash_balance=account.cash_balance,
        total_value=total_value,
        total_invested=total_invested,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=total_gain_loss_percent,
        holdings_count=len(holdings),
    )


async def get_sector_allocation(
    session: AsyncSession, account_id: str
) -> list[SectorAllocation]:
    """Group the account's market value by sector.

    Stocks without a sector are left out.

    Returns:
        Allocations ordered by sector value, largest first
    """
    result = await session.execute(
        select(Sector.name, Holding.quantity_owned, Stock.current_price)
        .select_from(Holding)
        .join(Stock, Holding.stock_id == Stock.id)
        .join(Sector, Stock.sector_id == Sector.id)
        .where(Holding.account_id == account_id)
    )

    allocations: dict[str, SectorAllocation] = {}
    for sector_name, quantity, price in result.all():
        entry = allocations.setdefault(
            sector_name, SectorAllocation(sector_name, ZERO, 0)
        )
        entry.sector_value += to_money(price * quantity)
        entry.stock_count += 1

    return sorted(allocations.values(), key=lambda a: a.sector_value, reverse=True)
