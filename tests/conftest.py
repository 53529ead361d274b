"""
Shared pytest fixtures for testing the trading simulator.

Uses an in-memory SQLite database for fast, isolated tests.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.database import Base, create_tables, get_session, make_engine, make_sessionmaker
from simtrader.main import app
from simtrader.models import Account, Sector, Stock
from simtrader.services.admin import generate_api_key, hash_api_key


# Use in-memory SQLite for tests (fast, isolated)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio backend for pytest-asyncio."""
    return "asyncio"


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine.

    Creates tables at the start, drops them at the end.
    Each test gets a fresh database.
    """
    engine = make_engine(TEST_DATABASE_URL)
    await create_tables(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Provide a database session for a test.

    Rolls back the session after each test for isolation.
    """
    async_session = make_sessionmaker(test_engine)

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_client(test_engine):
    """Provide a FastAPI test client with test database.

    Overrides the get_session dependency to use our test database.
    """
    async_session = make_sessionmaker(test_engine)

    async def override_get_session():
        async with async_session() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Helper fixtures for creating test data ---


async def make_account(
    session: AsyncSession,
    account_id: str,
    cash: str = "10000.00",
) -> tuple[Account, str]:
    """Create an account and return it with its plain API key."""
    api_key = generate_api_key()
    account = Account(
        id=account_id,
        api_key_hash=hash_api_key(api_key),
        username=account_id,
        email=f"{account_id}@example.com",
        cash_balance=Decimal(cash),
    )
    session.add(account)
    await session.commit()
    await session.refresh(account)
    return account, api_key


@pytest_asyncio.fixture
async def sector(test_session):
    """Create the Technology sector."""
    sector = Sector(name="Technology", description="Technology companies")
    test_session.add(sector)
    await test_session.commit()
    await test_session.refresh(sector)
    return sector


@pytest_asyncio.fixture
async def stock(test_session, sector):
    """Create a stock priced at 100.00."""
    stock = Stock(
        symbol="TECH",
        company_name="Tech Corp",
        sector_id=sector.id,
        current_price=Decimal("100.00"),
    )
    test_session.add(stock)
    await test_session.commit()
    await test_session.refresh(stock)
    return stock


@pytest_asyncio.fixture
async def stock_no_sector(test_session):
    """Create a stock without a sector, priced at 50.00."""
    stock = Stock(
        symbol="MISC",
        company_name="Misc Holdings",
        current_price=Decimal("50.00"),
    )
    test_session.add(stock)
    await test_session.commit()
    await test_session.refresh(stock)
    return stock


@pytest_asyncio.fixture
async def trader_account(test_session):
    """Create a trader account with 10,000.00 cash; returns (account, api_key)."""
    return await make_account(test_session, "trader1")


@pytest_asyncio.fixture
async def auth_headers(trader_account):
    _, api_key = trader_account
    return {"X-API-Key": api_key}


@pytest_asyncio.fixture
async def account_factory(test_session):
    """Create further accounts: await account_factory("trader2", cash="500.00")."""

    async def factory(account_id: str, cash: str = "10000.00") -> tuple[Account, str]:
        return await make_account(test_session, account_id, cash)

    return factory
