"""Trader API endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.auth import get_current_account
from simtrader.database import get_session
from simtrader.errors import SimTraderError
from simtrader.models import Account, OrderStatus
from simtrader.schemas.trader import (
    AccountInfoResponse,
    OrderCreate,
    OrderExecutionResponse,
    OrderListResponse,
    OrderResponse,
    TransactionListResponse,
    TransactionResponse,
)
from simtrader.services import trading as trading_service

router = APIRouter()


# ============================================================================
# Account endpoints
# ============================================================================


@router.get(
    "/account",
    response_model=AccountInfoResponse,
    summary="Get my account info",
)
async def get_account(
    account: Account = Depends(get_current_account),
) -> AccountInfoResponse:
    """Get the authenticated trader's account information."""
    return AccountInfoResponse(
        account_id=account.id,
        username=account.username,
        email=account.email,
        first_name=account.first_name,
        last_name=account.last_name,
        risk_tolerance=account.risk_tolerance,
        cash_balance=account.cash_balance,
        subscription_tier=account.subscription_tier,
        created_at=account.created_at,
    )


# ============================================================================
# Order endpoints
# ============================================================================


@router.post(
    "/orders",
    response_model=OrderExecutionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
)
async def place_order(
    data: OrderCreate,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> OrderExecutionResponse:
    """Place and immediately execute a buy or sell order.

    - **stock_id**: Stock to trade
    - **side**: BUY or SELL
    - **order_type**: MARKET (current price) or LIMIT (fills at limit_price)
    - **quantity**: Number of shares
    - **limit_price**: Required for LIMIT orders, ignored for MARKET orders
    - **client_order_id**: Optional idempotency key
    """
    try:
        result = await trading_service.execute_order(
            session,
            account.id,
            data.stock_id,
            data.side,
            data.order_type,
            data.quantity,
            limit_price=data.limit_price,
            client_order_id=data.client_order_id,
        )
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return OrderExecutionResponse.model_validate(result)


@router.get(
    "/orders",
    response_model=OrderListResponse,
    summary="List my orders",
)
async def list_orders(
    status_filter: OrderStatus | None = Query(
        default=None, alias="status", description="Filter by order status"
    ),
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> OrderListResponse:
    """Get all orders for the authenticated trader, newest first.

    Optionally filter by status (PENDING, EXECUTED, REJECTED, CANCELLED).
    """
    orders = await trading_service.get_account_orders(
        session, account.id, status=status_filter
    )
    return OrderListResponse(orders=[OrderResponse.model_validate(o) for o in orders])


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    summary="Get order details",
)
async def get_order(
    order_id: str,
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> OrderResponse:
    """Get details of a specific order."""
    order = await trading_service.get_order(session, order_id, account.id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order '{order_id}' not found",
        )
    return OrderResponse.model_validate(order)


# ============================================================================
# Transaction endpoints
# ============================================================================


@router.get(
    "/transactions",
    response_model=TransactionListResponse,
    summary="List my transactions",
)
async def list_transactions(
    limit: int = Query(default=50, ge=1, le=500, description="Maximum rows returned"),
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> TransactionListResponse:
    """Get executed fills for the authenticated trader, newest first."""
    rows = await trading_service.get_account_transactions(session, account.id, limit)
    return TransactionListResponse(
        transactions=[
            TransactionResponse(
                id=t.id,
                order_id=t.order_id,
                stock_id=t.stock_id,
                symbol=symbol,
                company_name=company_name,
                transaction_type=t.transaction_type,
                quantity=t.quantity,
                price=t.price,
                total_amount=t.total_amount,
                commission_fee=t.commission_fee,
                realized_gain_loss=t.realized_gain_loss,
                timestamp=t.timestamp,
            )
            for t, symbol, company_name in rows
        ]
    )
