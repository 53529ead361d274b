"""Pydantic schemas for request/response validation."""

from simtrader.schemas.admin import (
    AccountCreate,
    AccountListItem,
    AccountResponse,
    CompetitionCreate,
    PriceUpdate,
    PriceUpdateResponse,
    RecommendationCreate,
    SampleDataResponse,
    SectorCreate,
    StockCreate,
)
from simtrader.schemas.competitions import (
    CompetitionListResponse,
    CompetitionResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
    ParticipationListResponse,
    ParticipationResponse,
)
from simtrader.schemas.market import (
    SectorListResponse,
    SectorPublic,
    StockListResponse,
    StockPublic,
)
from simtrader.schemas.portfolio import (
    HoldingWithPnLResponse,
    PortfolioHoldingsResponse,
    PortfolioSummaryResponse,
    SectorAllocationResponse,
)
from simtrader.schemas.recommendations import (
    FollowResponse,
    RecommendationListResponse,
    RecommendationResponse,
)
from simtrader.schemas.subscriptions import (
    CurrentSubscriptionResponse,
    SubscriptionHistoryResponse,
    SubscriptionResponse,
    SubscriptionUpgrade,
    TierResponse,
)
from simtrader.schemas.trader import (
    AccountInfoResponse,
    ExecutedHolding,
    OrderCreate,
    OrderExecutionResponse,
    OrderListResponse,
    OrderResponse,
    TransactionListResponse,
    TransactionResponse,
)
from simtrader.schemas.watchlist import (
    AlertCreate,
    AlertListResponse,
    AlertResponse,
    WatchlistAdd,
    WatchlistItemResponse,
    WatchlistResponse,
)

__all__ = [
    # Admin schemas
    "AccountCreate",
    "AccountResponse",
    "AccountListItem",
    "SectorCreate",
    "StockCreate",
    "PriceUpdate",
    "PriceUpdateResponse",
    "RecommendationCreate",
    "CompetitionCreate",
    "SampleDataResponse",
    # Market schemas
    "StockPublic",
    "StockListResponse",
    "SectorPublic",
    "SectorListResponse",
    # Trader schemas
    "OrderCreate",
    "OrderExecutionResponse",
    "ExecutedHolding",
    "OrderResponse",
    "OrderListResponse",
    "TransactionResponse",
    "TransactionListResponse",
    "AccountInfoResponse",
    # Portfolio schemas
    "HoldingWithPnLResponse",
    "PortfolioHoldingsResponse",
    "PortfolioSummaryResponse",
    "SectorAllocationResponse",
    # Watchlist and alert schemas
    "WatchlistAdd",
    "WatchlistItemResponse",
    "WatchlistResponse",
    "AlertCreate",
    "AlertResponse",
    "AlertListResponse",
    # Recommendation schemas
    "RecommendationResponse",
    "RecommendationListResponse",
    "FollowResponse",
    # Competition schemas
    "CompetitionResponse",
    "CompetitionListResponse",
    "ParticipationResponse",
    "ParticipationListResponse",
    "LeaderboardEntryResponse",
    "LeaderboardResponse",
    # Subscription schemas
    "TierResponse",
    "SubscriptionUpgrade",
    "SubscriptionResponse",
    "CurrentSubscriptionResponse",
    "SubscriptionHistoryResponse",
]
