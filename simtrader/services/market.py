"""Market service - query and maintain stocks and sectors."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.errors import InstrumentNotFound, InvalidStockPrice, NotFound
from simtrader.models import AlertType, Sector, Stock, StockAlert
from simtrader.services.trading import to_money

logger = logging.getLogger(__name__)


async def get_stocks(session: AsyncSession) -> list[tuple[Stock, str | None]]:
    """Get all stocks with their sector name.

    Args:
        session: Database session

    Returns:
        List of (stock, sector_name) ordered by symbol
    """
    result = await session.execute(
        select(Stock, Sector.name)
        .outerjoin(Sector, Stock.sector_id == Sector.id)
        .order_by(Stock.symbol)
    )
    return [tuple(row) for row in result.all()]


async def get_stock_by_symbol(
    session: AsyncSession, symbol: str
) -> tuple[Stock, str | None] | None:
    """Get a single stock by symbol.

    Args:
        session: Database session
        symbol: Ticker symbol (case-insensitive)

    Returns:
        (stock, sector_name) or None if not found
    """
    result = await session.execute(
        select(Stock, Sector.name)
        .outerjoin(Sector, Stock.sector_id == Sector.id)
        .where(Stock.symbol == symbol.upper())
    )
    row = result.one_or_none()
    return tuple(row) if row else None


async def get_stock(session: AsyncSession, stock_id: int) -> Stock | None:
    """Get a stock by ID."""
    result = await session.execute(select(Stock).where(Stock.id == stock_id))
    return result.scalar_one_or_none()


async def get_sectors(session: AsyncSession) -> list[Sector]:
    """Get all sectors ordered by name."""
    result = await session.execute(select(Sector).order_by(Sector.name))
    return list(result.scalars().all())


async def update_stock_price(
    session: AsyncSession, stock_id: int, new_price: Decimal
) -> tuple[Stock, list[StockAlert]]:
    """Set a stock's current price and fire any alerts it crosses.

    day_change and day_change_percent are computed against the previous price.

    Args:
        session: Database session
        stock_id: Stock ID
        new_price: New price (positive)

    Returns:
        Tuple of (updated stock, alerts triggered by this update)

    Raises:
        InstrumentNotFound: If the stock does not exist
        InvalidStockPrice: If the price rounds to less than one cent
    """
    price = to_money(Decimal(str(new_price)))
    if price <= 0:
        raise InvalidStockPrice(new_price)

    stock = await get_stock(session, stock_id)
    if stock is None:
        raise InstrumentNotFound(stock_id)

    old_price = stock.current_price
    change = price - old_price

    stock.current_price = price
    stock.day_change = change
    stock.day_change_percent = to_money(change / old_price * 100)
    stock.last_updated = datetime.now(UTC).replace(tzinfo=None)

    triggered = await _trigger_alerts(session, stock)

    await session.commit()
    await session.refresh(stock)

    logger.info(
        "Stock price updated",
        extra={
            "symbol": stock.symbol,
            "old_price": float(old_price),
            "new_price": float(price),
            "alerts_triggered": len(triggered),
        },
    )
    return stock, triggered


async def _trigger_alerts(session: AsyncSession, stock: Stock) -> list[StockAlert]:
    """Mark active alerts whose condition the stock's price now meets."""
    result = await session.execute(
        select(StockAlert).where(
            and_(StockAlert.stock_id == stock.id, StockAlert.is_triggered.is_(False))
        )
    )
    now = datetime.now(UTC).replace(tzinfo=None)
    triggered = []
    for alert in result.scalars():
        if alert.alert_type == AlertType.PRICE_ABOVE:
            hit = stock.current_price >= alert.target_value
        else:
            hit = stock.current_price <= alert.target_value
        if hit:
            alert.is_triggered = True
            alert.triggered_at = now
            triggered.append(alert)
    return triggered


async def require_stock(session: AsyncSession, stock_id: int) -> Stock:
    """Get a stock or raise InstrumentNotFound."""
    stock = await get_stock(session, stock_id)
    if stock is None:
        raise InstrumentNotFound(stock_id)
    return stock


async def require_sector(session: AsyncSession, sector_id: int) -> Sector:
    """Get a sector or raise NotFound."""
    result = await session.execute(select(Sector).where(Sector.id == sector_id))
    sector = result.scalar_one_or_none()
    if sector is None:
        raise NotFound(f"Sector '{sector_id}' not found")
    return sector
