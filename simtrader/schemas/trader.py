"""Pydantic schemas for trader endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from simtrader.models import OrderSide, OrderStatus, OrderType


# ============================================================================
# Order schemas
# ============================================================================


class OrderCreate(BaseModel):
    """Request schema for placing an order."""

    stock_id: int = Field(..., description="Stock to trade")
    side: OrderSide = Field(..., description="BUY or SELL")
    order_type: OrderType = Field(default=OrderType.MARKET, description="LIMIT or MARKET")
    quantity: int = Field(..., gt=0, description="Number of shares")
    limit_price: Decimal | None = Field(
        default=None,
        gt=0,
        decimal_places=2,
        description="Limit price (required for LIMIT orders)",
    )
    client_order_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=64,
        description="Idempotency key; resubmitting it returns the original execution",
    )

    @model_validator(mode="after")
    def limit_requires_price(self) -> "OrderCreate":
        if self.order_type == OrderType.LIMIT and self.limit_price is None:
            raise ValueError("limit_price is required for LIMIT orders")
        return self


class ExecutedHolding(BaseModel):
    """Holding state after an execution."""

    quantity_owned: int
    average_buy_price: Decimal
    total_invested: Decimal

    model_config = {"from_attributes": True}


class OrderExecutionResponse(BaseModel):
    """Response schema for an executed order."""

    order_id: str
    transaction_id: str
    side: OrderSide
    quantity: int
    execution_price: Decimal
    total_amount: Decimal
    new_balance: Decimal
    holding: ExecutedHolding | None = Field(
        None, description="Remaining position, null when it was closed"
    )
    realized_gain_loss: Decimal | None = None
    duplicate: bool = False

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Response schema for order data."""

    id: str
    stock_id: int
    side: OrderSide
    order_type: OrderType
    quantity: int
    limit_price: Decimal | None
    status: OrderStatus
    client_order_id: str | None
    order_date: datetime
    execution_date: datetime | None

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    """Response for listing orders."""

    orders: list[OrderResponse] = Field(default_factory=list)


# ============================================================================
# Transaction schemas
# ============================================================================


class TransactionResponse(BaseModel):
    """Response schema for a fill in the transaction ledger."""

    id: str
    order_id: str
    stock_id: int
    symbol: str
    company_name: str
    transaction_type: OrderSide
    quantity: int
    price: Decimal
    total_amount: Decimal
    commission_fee: Decimal
    realized_gain_loss: Decimal | None
    timestamp: datetime


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse] = Field(default_factory=list)


# ============================================================================
# Account schemas
# ============================================================================


class AccountInfoResponse(BaseModel):
    """Response schema for account info (trader view)."""

    account_id: str
    username: str
    email: str
    first_name: str | None
    last_name: str | None
    risk_tolerance: str | None
    cash_balance: Decimal
    subscription_tier: str
    created_at: datetime
