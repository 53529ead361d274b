"""Admin API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader import seed
from simtrader.database import get_session
from simtrader.errors import SimTraderError
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
from simtrader.schemas.competitions import CompetitionResponse
from simtrader.schemas.market import SectorPublic, StockPublic
from simtrader.schemas.recommendations import RecommendationResponse
from simtrader.services import admin as admin_service
from simtrader.services import market as market_service

router = APIRouter()


# ============================================================================
# Accounts
# ============================================================================


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new trader account",
)
async def create_account(
    data: AccountCreate,
    session: AsyncSession = Depends(get_session),
) -> AccountResponse:
    """Register a new trader account.

    Returns the account details including the API key.
    **Store the API key securely - it cannot be retrieved later.**

    - **account_id**: Unique account identifier
    - **username**, **email**: Must be unique
    - **initial_cash**: Starting cash balance (default: STARTING_BALANCE)
    """
    try:
        account, api_key = await admin_service.create_account(session, data)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Account ID, username or email already exists",
        )
    return AccountResponse(
        account_id=account.id,
        username=account.username,
        email=account.email,
        cash_balance=account.cash_balance,
        api_key=api_key,
        created_at=account.created_at,
    )


@router.get(
    "/accounts",
    response_model=list[AccountListItem],
    summary="List all accounts",
)
async def list_accounts(
    session: AsyncSession = Depends(get_session),
) -> list[AccountListItem]:
    """Get all trader accounts."""
    accounts = await admin_service.list_accounts(session)
    return [
        AccountListItem(
            account_id=a.id,
            username=a.username,
            email=a.email,
            cash_balance=a.cash_balance,
            subscription_tier=a.subscription_tier,
            created_at=a.created_at,
        )
        for a in accounts
    ]


# ============================================================================
# Market data
# ============================================================================


@router.post(
    "/sectors",
    response_model=SectorPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sector",
)
async def create_sector(
    data: SectorCreate,
    session: AsyncSession = Depends(get_session),
) -> SectorPublic:
    try:
        sector = await admin_service.create_sector(session, data)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Sector '{data.name}' already exists",
        )
    return SectorPublic.model_validate(sector)


@router.post(
    "/stocks",
    response_model=StockPublic,
    status_code=status.HTTP_201_CREATED,
    summary="List a new stock",
)
async def create_stock(
    data: StockCreate,
    session: AsyncSession = Depends(get_session),
) -> StockPublic:
    """List a stock for trading.

    - **symbol**: Unique symbol (will be uppercased)
    - **current_price**: Opening price
    """
    try:
        stock = await admin_service.create_stock(session, data)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Stock with symbol '{data.symbol}' already exists",
        )
    return StockPublic.model_validate(stock)


@router.put(
    "/stocks/{stock_id}/price",
    response_model=PriceUpdateResponse,
    summary="Update a stock's price",
)
async def update_stock_price(
    stock_id: int,
    data: PriceUpdate,
    session: AsyncSession = Depends(get_session),
) -> PriceUpdateResponse:
    """Set the current price and fire any price alerts it crosses."""
    try:
        stock, triggered = await market_service.update_stock_price(
            session, stock_id, data.price
        )
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return PriceUpdateResponse(
        stock_id=stock.id,
        symbol=stock.symbol,
        current_price=stock.current_price,
        day_change=stock.day_change,
        day_change_percent=stock.day_change_percent,
        alerts_triggered=len(triggered),
    )


@router.post(
    "/sample-data",
    response_model=SampleDataResponse,
    summary="Load sample sectors and stocks",
)
async def load_sample_data(
    session: AsyncSession = Depends(get_session),
) -> SampleDataResponse:
    """Load the bundled sample market. Does nothing if stocks already exist."""
    sectors, stocks = await seed.seed_market(session, seed.load_yaml())
    return SampleDataResponse(sectors_created=sectors, stocks_created=stocks)


# ============================================================================
# Recommendations and competitions
# ============================================================================


@router.post(
    "/recommendations",
    response_model=RecommendationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a recommendation",
)
async def create_recommendation(
    data: RecommendationCreate,
    session: AsyncSession = Depends(get_session),
) -> RecommendationResponse:
    try:
        recommendation = await admin_service.create_recommendation(session, data)
    except SimTraderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return RecommendationResponse.model_validate(recommendation)


@router.post(
    "/competitions",
    response_model=CompetitionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a competition",
)
async def create_competition(
    data: CompetitionCreate,
    session: AsyncSession = Depends(get_session),
) -> CompetitionResponse:
    competition = await admin_service.create_competition(session, data)
    return CompetitionResponse.model_validate(competition)
