"""Order execution and portfolio accounting.

Every order is executed synchronously in the request that submits it:

1. Validate quantity, price, funds (BUY) or shares (SELL)
2. Record the order (PENDING -> EXECUTED)
3. Record the fill in the transaction ledger
4. Debit or credit the account's cash balance
5. Create, update or delete the holding

Steps 2-5 share one database transaction and are committed together.
Orders from the same account are serialized with a per-account lock so
concurrent requests cannot lose updates to the balance or the holding.
LIMIT orders do not rest in a book: they fill immediately at the limit price.
"""

import asyncio
import logging
import uuid
import weakref
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from sqlalchemy import and_, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader import telemetry
from simtrader.errors import (
    AccountNotFound,
    InstrumentNotFound,
    InsufficientFunds,
    InsufficientShares,
    InvalidPrice,
    InvalidQuantity,
    PersistenceFailure,
    SimTraderError,
)
from simtrader.models import (
    Account,
    Holding,
    Order,
    OrderSide,
    OrderStatus,
    OrderType,
    Stock,
    Transaction,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
AVERAGE_PRICE_QUANTUM = Decimal("0.0000000001")

# account_id -> lock; entries disappear once no request holds the lock
_account_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


@dataclass
class PricedOrder:
    """Outcome of a successful validation."""

    execution_price: Decimal
    total_amount: Decimal


@dataclass
class ExecutionResult:
    """Outcome of an executed order."""

    order_id: str
    transaction_id: str
    side: OrderSide
    quantity: int
    execution_price: Decimal
    total_amount: Decimal
    new_balance: Decimal
    holding: Holding | None  # None when the position was closed
    realized_gain_loss: Decimal | None
    duplicate: bool = False


def to_money(value: Decimal) -> Decimal:
    """Round an amount to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def generate_order_id() -> str:
    """Generate a unique order ID."""
    return str(uuid.uuid4())


def generate_transaction_id() -> str:
    """Generate a unique transaction ID."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def account_lock(account_id: str) -> asyncio.Lock:
    """Get the lock serializing order execution for an account."""
    lock = _account_locks.get(account_id)
    if lock is None:
        lock = asyncio.Lock()
        _account_locks[account_id] = lock
    return lock


# ============================================================================
# Lookups
# ============================================================================


async def _get_account(
    session: AsyncSession, account_id: str, for_update: bool = False
) -> Account:
    query = select(Account).where(Account.id == account_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFound(account_id)
    return account


async def _get_stock(session: AsyncSession, stock_id: int) -> Stock:
    result = await session.execute(select(Stock).where(Stock.id == stock_id))
    stock = result.scalar_one_or_none()
    if stock is None:
        raise InstrumentNotFound(stock_id)
    return stock


async def get_holding(
    session: AsyncSession, account_id: str, stock_id: int, for_update: bool = False
) -> Holding | None:
    """Get an account's holding in one stock.

    Args:
        session: Database session
        account_id: Account ID
        stock_id: Stock ID
        for_update: Lock the row and reload it from the database

    Returns:
        Holding or None if the account owns no shares
    """
    query = select(Holding).where(
        and_(Holding.account_id == account_id, Holding.stock_id == stock_id)
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


# ============================================================================
# Validation
# ============================================================================


def _check_order_input(
    order_type: OrderType, quantity, limit_price
) -> Decimal | None:
    """Validate quantity and limit price, returning the normalized limit price."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity)

    if order_type == OrderType.MARKET:
        return None  # Market orders don't carry a price

    if limit_price is None:
        raise InvalidPrice(limit_price)
    # Rounded to cents before the check
    price = to_money(Decimal(str(limit_price)))
    if price <= 0:
        raise InvalidPrice(limit_price)
    return price


def _price_order(
    account: Account,
    stock: Stock,
    holding: Holding | None,
    side: OrderSide,
    order_type: OrderType,
    quantity: int,
    limit_price: Decimal | None,
) -> PricedOrder:
    """Determine the execution price and check funds or shares."""
    if order_type == OrderType.MARKET:
        execution_price = to_money(stock.current_price)
    else:
        execution_price = limit_price
    total_amount = to_money(execution_price * quantity)

    if side == OrderSide.BUY:
        if total_amount > account.cash_balance:
            raise InsufficientFunds(total_amount, account.cash_balance)
    else:
        owned = holding.quantity_owned if holding else 0
        if owned < quantity:
            raise InsufficientShares(quantity, owned)

    return PricedOrder(execution_price=execution_price, total_amount=total_amount)


async def validate_and_price_order(
    session: AsyncSession,
    account_id: str,
    stock_id: int,
    side: OrderSide | str,
    order_type: OrderType | str,
    quantity: int,
    limit_price: Decimal | None = None,
) -> PricedOrder:
    """Validate an order without executing it.

    Args:
        session: Database session
        account_id: Account placing the order
        stock_id: Stock to trade
        side: BUY or SELL
        order_type: MARKET or LIMIT
        quantity: Number of shares (positive integer)
        limit_price: Required for LIMIT orders, ignored for MARKET orders

    Returns:
        The execution price and total amount the order would fill at

    Raises:
        InvalidQuantity, InvalidPrice, InstrumentNotFound, AccountNotFound,
        InsufficientFunds, InsufficientShares
    """
    side = OrderSide(side)
    order_type = OrderType(order_type)
    price = _check_order_input(order_type, quantity, limit_price)

    stock = await _get_stock(session, stock_id)
    account = await _get_account(session, account_id)
    holding = await get_holding(session, account_id, stock_id)
    return _price_order(account, stock, holding, side, order_type, quantity, price)


# ============================================================================
# Execution
# ============================================================================


def _adjust_balance(account: Account, side: OrderSide, amount: Decimal) -> Decimal:
    """Debit a buy or credit a sell, returning the new balance."""
    if side == OrderSide.BUY:
        account.cash_balance = to_money(account.cash_balance - amount)
    else:
        account.cash_balance = to_money(account.cash_balance + amount)
    return account.cash_balance


async def _apply_to_holding(
    session: AsyncSession,
    account_id: str,
    stock_id: int,
    holding: Holding | None,
    side: OrderSide,
    quantity: int,
    price: Decimal,
) -> Holding | None:
    """Update the position for a fill.

    BUY adds at weighted-average cost. SELL leaves the average price unchanged,
    so total_invested shrinks in proportion to the shares sold; selling
    everything deletes the holding. total_invested is always derived from
    quantity and average, keeping the two consistent at any position size.

    Returns:
        The holding after the fill, or None if it was deleted
    """
    now = _utcnow()
    amount = to_money(price * quantity)

    if side == OrderSide.BUY:
        if holding is None:
            holding = Holding(
                account_id=account_id,
                stock_id=stock_id,
                quantity_owned=quantity,
                average_buy_price=price,
                total_invested=amount,
                first_purchase_date=now,
                last_updated=now,
            )
            session.add(holding)
            return holding

        new_quantity = holding.quantity_owned + quantity
        cost = holding.total_invested + amount
        # Rounded down so quantity * average never exceeds the cost paid
        average = (cost / new_quantity).quantize(AVERAGE_PRICE_QUANTUM, rounding=ROUND_DOWN)
        holding.quantity_owned = new_quantity
        holding.average_buy_price = average
        holding.total_invested = to_money(new_quantity * average)
        holding.last_updated = now
        return holding

    # SELL - the validator guarantees holding exists with enough shares
    old_quantity = holding.quantity_owned
    new_quantity = old_quantity - quantity
    if new_quantity == 0:
        await session.delete(holding)
        return None

    holding.total_invested = to_money(new_quantity * holding.average_buy_price)
    holding.quantity_owned = new_quantity
    holding.last_updated = now
    return holding


async def _find_by_client_order_id(
    session: AsyncSession, account_id: str, client_order_id: str
) -> Order | None:
    result = await session.execute(
        select(Order).where(
            and_(
                Order.account_id == account_id,
                Order.client_order_id == client_order_id,
            )
        )
    )
    return result.scalar_one_or_none()


async def _replay(session: AsyncSession, order: Order) -> ExecutionResult:
    """Rebuild the result of an order that was already executed."""
    result = await session.execute(
        select(Transaction).where(Transaction.order_id == order.id)
    )
    transaction = result.scalar_one()
    account = await _get_account(session, order.account_id)
    holding = await get_holding(session, order.account_id, order.stock_id)

    return ExecutionResult(
        order_id=order.id,
        transaction_id=transaction.id,
        side=order.side,
        quantity=order.quantity,
        execution_price=transaction.price,
        total_amount=transaction.total_amount,
        new_balance=account.cash_balance,
        holding=holding,
        realized_gain_loss=transaction.realized_gain_loss,
        duplicate=True,
    )


async def execute_order(
    session: AsyncSession,
    account_id: str,
    stock_id: int,
    side: OrderSide | str,
    order_type: OrderType | str,
    quantity: int,
    limit_price: Decimal | None = None,
    client_order_id: str | None = None,
) -> ExecutionResult:
    """Validate and execute an order as one atomic unit of work.

    If client_order_id was already used by this account, the original
    execution is returned with duplicate=True and nothing is applied again.

    Args:
        session: Database session (committed or rolled back here)
        account_id: Account placing the order
        stock_id: Stock to trade
        side: BUY or SELL
        order_type: MARKET or LIMIT
        quantity: Number of shares (positive integer)
        limit_price: Required for LIMIT orders, ignored for MARKET orders
        client_order_id: Optional idempotency key

    Returns:
        The execution result

    Raises:
        InvalidQuantity, InvalidPrice, InstrumentNotFound, AccountNotFound,
        InsufficientFunds, InsufficientShares: validation failed, nothing written
        PersistenceFailure: the database failed mid-sequence, nothing written
    """
    side = OrderSide(side)
    order_type = OrderType(order_type)

    async with account_lock(account_id):
        try:
            price = _check_order_input(order_type, quantity, limit_price)

            if client_order_id:
                existing = await _find_by_client_order_id(
                    session, account_id, client_order_id
                )
                if existing is not None:
                    logger.info(
                        "Duplicate order submission",
                        extra={"order_id": existing.id, "client_order_id": client_order_id},
                    )
                    return await _replay(session, existing)

            stock = await _get_stock(session, stock_id)
            account = await _get_account(session, account_id, for_update=True)
            holding = await get_holding(session, account_id, stock_id, for_update=True)
            priced = _price_order(
                account, stock, holding, side, order_type, quantity, price
            )
        except SimTraderError as e:
            await session.rollback()
            telemetry.record_order_rejected(type(e).__name__)
            logger.info(
                "Order rejected",
                extra={
                    "account_id": account_id,
                    "stock_id": stock_id,
                    "side": side.value,
                    "quantity": quantity,
                    "reason": type(e).__name__,
                },
            )
            raise

        try:
            # Order recorder
            order = Order(
                id=generate_order_id(),
                account_id=account_id,
                stock_id=stock_id,
                side=side,
                order_type=order_type,
                quantity=quantity,
                limit_price=price,
                status=OrderStatus.PENDING,
                client_order_id=client_order_id,
                order_date=_utcnow(),
            )
            session.add(order)
            await session.flush()

            # Transaction recorder - realized P/L uses the pre-trade average cost
            realized_gain_loss = None
            if side == OrderSide.SELL:
                realized_gain_loss = to_money(
                    (priced.execution_price - holding.average_buy_price) * quantity
                )
            transaction = Transaction(
                id=generate_transaction_id(),
                account_id=account_id,
                stock_id=stock_id,
                transaction_type=side,
                quantity=quantity,
                price=priced.execution_price,
                total_amount=priced.total_amount,
                commission_fee=Decimal("0.00"),
                order_id=order.id,
                realized_gain_loss=realized_gain_loss,
                timestamp=_utcnow(),
            )
            session.add(transaction)

            new_balance = _adjust_balance(account, side, priced.total_amount)
            holding = await _apply_to_holding(
                session, account_id, stock_id, holding, side, quantity,
                priced.execution_price,
            )

            order.status = OrderStatus.EXECUTED
            order.execution_date = _utcnow()

            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(
                "Order execution failed, rolled back",
                extra={"account_id": account_id, "stock_id": stock_id, "error": str(e)},
            )
            raise PersistenceFailure() from e

        if holding is not None:
            await session.refresh(holding)

    telemetry.record_order_executed(
        stock.symbol, side.value, order_type.value, quantity,
        priced.execution_price, realized_gain_loss,
    )
    logger.info(
        "Order executed",
        extra={
            "order_id": order.id,
            "transaction_id": transaction.id,
            "account_id": account_id,
            "symbol": stock.symbol,
            "side": side.value,
            "quantity": quantity,
            "price": float(priced.execution_price),
        },
    )

    return ExecutionResult(
        order_id=order.id,
        transaction_id=transaction.id,
        side=side,
        quantity=quantity,
        execution_price=priced.execution_price,
        total_amount=priced.total_amount,
        new_balance=new_balance,
        holding=holding,
        realized_gain_loss=realized_gain_loss,
    )


# ============================================================================
# Order and transaction history
# ============================================================================


async def get_account_orders(
    session: AsyncSession,
    account_id: str,
    status: OrderStatus | None = None,
) -> list[Order]:
    """Get orders for an account, newest first.

    Args:
        session: Database session
        account_id: Account ID
        status: Filter by order status (optional)

    Returns:
        List of orders
    """
    query = select(Order).where(Order.account_id == account_id)
    if status:
        query = query.where(Order.status == status)

    query = query.order_by(desc(Order.order_date))
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_order(
    session: AsyncSession, order_id: str, account_id: str
) -> Order | None:
    """Get a specific order owned by the account."""
    result = await session.execute(
        select(Order).where(and_(Order.id == order_id, Order.account_id == account_id))
    )
    return result.scalar_one_or_none()


async def get_account_transactions(
    session: AsyncSession, account_id: str, limit: int = 50
) -> list[tuple[Transaction, str, str]]:
    """Get the account's fills with symbol and company name, newest first.

    Returns:
        List of (transaction, symbol, company_name) rows
    """
    result = await session.execute(
        select(Transaction, Stock.symbol, Stock.company_name)
        .join(Stock, Transaction.stock_id == Stock.id)
        .where(Transaction.account_id == account_id)
        .order_by(desc(Transaction.timestamp))
        .limit(limit)
    )
    return [tuple(row) for row in result.all()]
