"""Admin service - business logic for admin operations."""

import hashlib
import logging
import os
import secrets
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.models import (
    Account,
    Competition,
    Recommendation,
    Sector,
    Stock,
)
from simtrader.schemas.admin import (
    AccountCreate,
    CompetitionCreate,
    RecommendationCreate,
    SectorCreate,
    StockCreate,
)
from simtrader.services.market import require_sector, require_stock

logger = logging.getLogger(__name__)

STARTING_BALANCE = Decimal(os.getenv("STARTING_BALANCE", "10000.00"))


def generate_api_key() -> str:
    """Generate a secure API key for a trader account.

    Returns:
        A URL-safe random string (sk_ prefix + 43 characters)
    """
    return f"sk_{secrets.token_urlsafe(32)}"


def hash_api_key(api_key: str) -> str:
    """Hash an API key for secure storage.

    Args:
        api_key: The plain API key

    Returns:
        SHA-256 hash of the API key (64 hex characters)
    """
    return hashlib.sha256(api_key.encode()).hexdigest()


async def create_account(session: AsyncSession, data: AccountCreate) -> tuple[Account, str]:
    """Create a new trader account.

    Args:
        session: Database session
        data: Account creation data

    Returns:
        Tuple of (created account, API key)

    Raises:
        IntegrityError: If account_id, username or email already exists
    """
    api_key = generate_api_key()

    account = Account(
        id=data.account_id,
        api_key_hash=hash_api_key(api_key),
        username=data.username,
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        risk_tolerance=data.risk_tolerance,
        cash_balance=(
            data.initial_cash if data.initial_cash is not None else STARTING_BALANCE
        ),
    )
    session.add(account)
    await session.commit()
    await session.refresh(account)

    logger.info(
        "Account created",
        extra={"account_id": account.id, "cash_balance": float(account.cash_balance)},
    )
    return account, api_key


async def list_accounts(session: AsyncSession) -> list[Account]:
    """Get all accounts ordered by creation time."""
    result = await session.execute(select(Account).order_by(Account.created_at))
    return list(result.scalars().all())


async def create_sector(session: AsyncSession, data: SectorCreate) -> Sector:
    """Create a sector.

    Raises:
        IntegrityError: If the name already exists
    """
    sector = Sector(**data.model_dump())
    session.add(sector)
    await session.commit()
    await session.refresh(sector)
    return sector


async def create_stock(session: AsyncSession, data: StockCreate) -> Stock:
    """List a new stock.

    Raises:
        NotFound: If sector_id is given and does not exist
        IntegrityError: If the symbol already exists
    """
    if data.sector_id is not None:
        await require_sector(session, data.sector_id)

    stock = Stock(**data.model_dump())
    session.add(stock)
    await session.commit()
    await session.refresh(stock)

    logger.info(
        "Stock listed",
        extra={"symbol": stock.symbol, "price": float(stock.current_price)},
    )
    return stock


async def create_recommendation(
    session: AsyncSession, data: RecommendationCreate
) -> Recommendation:
    """Publish a recommendation for a stock.

    Raises:
        InstrumentNotFound: If the stock does not exist
    """
    await require_stock(session, data.stock_id)

    recommendation = Recommendation(**data.model_dump())
    session.add(recommendation)
    await session.commit()
    await session.refresh(recommendation)
    return recommendation


async def create_competition(
    session: AsyncSession, data: CompetitionCreate
) -> Competition:
    """Create a trading competition."""
    competition = Competition(**data.model_dump())
    session.add(competition)
    await session.commit()
    await session.refresh(competition)

    logger.info(
        "Competition created",
        extra={"competition_id": competition.id, "competition_name": competition.name},
    )
    return competition
