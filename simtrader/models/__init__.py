"""
SQLAlchemy models for the trading simulator.

This module exports all models and the Base class for easy imports:
    from simtrader.models import Base, Account, Stock, Holding, Order, Transaction
"""

from simtrader.database import Base
from simtrader.models.stock import Sector, Stock
from simtrader.models.account import Account
from simtrader.models.holding import Holding
from simtrader.models.order import Order, OrderSide, OrderType, OrderStatus
from simtrader.models.transaction import Transaction
from simtrader.models.watchlist import AlertType, StockAlert, WatchlistItem
from simtrader.models.recommendation import Recommendation, RecommendationType
from simtrader.models.competition import (
    Competition,
    CompetitionParticipant,
    CompetitionStatus,
)
from simtrader.models.subscription import Subscription, SubscriptionStatus

__all__ = [
    "Base",
    "Sector",
    "Stock",
    "Account",
    "Holding",
    "Order",
    "OrderSide",
    "OrderType",
    "OrderStatus",
    "Transaction",
    "WatchlistItem",
    "StockAlert",
    "AlertType",
    "Recommendation",
    "RecommendationType",
    "Competition",
    "CompetitionParticipant",
    "CompetitionStatus",
    "Subscription",
    "SubscriptionStatus",
]
