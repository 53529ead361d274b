"""Watchlist and price alert service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import and_, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.errors import Conflict, NotFound
from simtrader.models import AlertType, Stock, StockAlert, WatchlistItem
from simtrader.services.market import require_stock

logger = logging.getLogger(__name__)


@dataclass
class WatchlistEntry:
    """A watchlist item joined with the stock's market data."""

    item: WatchlistItem
    symbol: str
    company_name: str
    current_price: Decimal
    day_change: Decimal | None
    day_change_percent: Decimal | None


@dataclass
class AlertEntry:
    """An alert joined with the stock's current price."""

    alert: StockAlert
    symbol: str
    company_name: str
    current_price: Decimal


# ============================================================================
# Watchlist
# ============================================================================


async def get_watchlist(session: AsyncSession, account_id: str) -> list[WatchlistEntry]:
    """Get the account's watchlist, most recently added first."""
    result = await session.execute(
        select(WatchlistItem, Stock)
        .join(Stock, WatchlistItem.stock_id == Stock.id)
        .where(WatchlistItem.account_id == account_id)
        .order_by(desc(WatchlistItem.added_date), desc(WatchlistItem.id))
    )
    return [
        WatchlistEntry(
            item=item,
            symbol=stock.symbol,
            company_name=stock.company_name,
            current_price=stock.current_price,
            day_change=stock.day_change,
            day_change_percent=stock.day_change_percent,
        )
        for item, stock in result.all()
    ]


async def get_watchlist_item(
    session: AsyncSession, account_id: str, stock_id: int
) -> WatchlistItem | None:
    result = await session.execute(
        select(WatchlistItem).where(
            and_(
                WatchlistItem.account_id == account_id,
                WatchlistItem.stock_id == stock_id,
            )
        )
    )
    return result.scalar_one_or_none()


async def add_to_watchlist(
    session: AsyncSession,
    account_id: str,
    stock_id: int,
    alert_price_high: Decimal | None = None,
    alert_price_low: Decimal | None = None,
    notes: str | None = None,
) -> WatchlistItem:
    """Add a stock to the account's watchlist.

    Raises:
        InstrumentNotFound: If the stock does not exist
        Conflict: If the stock is already on the watchlist
    """
    await require_stock(session, stock_id)
    if await get_watchlist_item(session, account_id, stock_id) is not None:
        raise Conflict("Stock already in watchlist")

    item = WatchlistItem(
        account_id=account_id,
        stock_id=stock_id,
        alert_price_high=alert_price_high,
        alert_price_low=alert_price_low,
        notes=notes,
        added_date=datetime.now(UTC).replace(tzinfo=None),
    )
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item


async def remove_from_watchlist(
    session: AsyncSession, account_id: str, stock_id: int
) -> None:
    """Remove a stock from the account's watchlist.

    Raises:
        NotFound: If the stock is not on the watchlist
    """
    item = await get_watchlist_item(session, account_id, stock_id)
    if item is None:
        raise NotFound("Stock not in watchlist")
    await session.delete(item)
    await session.commit()


# ============================================================================
# Alerts
# ============================================================================


async def get_alerts(session: AsyncSession, account_id: str) -> list[AlertEntry]:
    """Get the account's alerts, newest first."""
    result = await session.execute(
        select(StockAlert, Stock)
        .join(Stock, StockAlert.stock_id == Stock.id)
        .where(StockAlert.account_id == account_id)
        .order_by(desc(StockAlert.created_at), desc(StockAlert.id))
    )
    return [
        AlertEntry(
            alert=alert,
            symbol=stock.symbol,
            company_name=stock.company_name,
            current_price=stock.current_price,
        )
        for alert, stock in result.all()
    ]


async def create_alert(
    session: AsyncSession,
    account_id: str,
    stock_id: int,
    alert_type: AlertType,
    target_value: Decimal,
    message: str | None = None,
) -> StockAlert:
    """Create a price alert.

    Raises:
        InstrumentNotFound: If the stock does not exist
    """
    await require_stock(session, stock_id)

    alert = StockAlert(
        account_id=account_id,
        stock_id=stock_id,
        alert_type=alert_type,
        target_value=target_value,
        message=message,
        is_triggered=False,
        created_at=datetime.now(UTC).replace(tzinfo=None),
    )
    session.add(alert)
    await session.commit()
    await session.refresh(alert)
    return alert


async def _require_alert(
    session: AsyncSession, account_id: str, alert_id: int
) -> StockAlert:
    result = await session.execute(
        select(StockAlert).where(
            and_(StockAlert.id == alert_id, StockAlert.account_id == account_id)
        )
    )
    alert = result.scalar_one_or_none()
    if alert is None:
        raise NotFound(f"Alert '{alert_id}' not found")
    return alert


async def delete_alert(session: AsyncSession, account_id: str, alert_id: int) -> None:
    """Delete one of the account's alerts.

    Raises:
        NotFound: If the alert does not exist or belongs to another account
    """
    alert = await _require_alert(session, account_id, alert_id)
    await session.delete(alert)
    await session.commit()


async def toggle_alert(session: AsyncSession, account_id: str, alert_id: int) -> StockAlert:
    """Flip an alert between active and triggered.

    Re-activating a triggered alert clears triggered_at so it can fire again.
    """
    alert = await _require_alert(session, account_id, alert_id)
    alert.is_triggered = not alert.is_triggered
    alert.triggered_at = (
        datetime.now(UTC).replace(tzinfo=None) if alert.is_triggered else None
    )
    await session.commit()
    await session.refresh(alert)
    return alert
