"""Concurrent orders and competition joins must not lose updates.

Runs against a file-backed SQLite database so every task gets its own
connection and session, as concurrent requests would.
"""

import asyncio
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from simtrader.database import create_tables, make_engine, make_sessionmaker
from simtrader.errors import Conflict, InsufficientFunds
from simtrader.models import (
    Account,
    Competition,
    CompetitionParticipant,
    Holding,
    OrderSide,
    OrderType,
    Stock,
    Transaction,
)
from simtrader.services import competitions, trading
from simtrader.services.admin import generate_api_key, hash_api_key


@pytest_asyncio.fixture
async def file_sessionmaker(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}")
    await create_tables(engine)

    yield make_sessionmaker(engine)

    await engine.dispose()


@pytest_asyncio.fixture
async def market(file_sessionmaker):
    """Two accounts and one stock at 10.00; returns (account ids, stock id)."""
    async with file_sessionmaker() as session:
        stock = Stock(symbol="CONC", company_name="Concurrent Inc", current_price=Decimal("10.00"))
        session.add(stock)
        for account_id in ("alice", "bob"):
            session.add(
                Account(
                    id=account_id,
                    api_key_hash=hash_api_key(generate_api_key()),
                    username=account_id,
                    email=f"{account_id}@example.com",
                    cash_balance=Decimal("1000.00"),
                )
            )
        await session.commit()
        return ("alice", "bob"), stock.id


async def place(sessionmaker, account_id, stock_id, side, quantity):
    async with sessionmaker() as session:
        return await trading.execute_order(
            session, account_id, stock_id, side, OrderType.MARKET, quantity
        )


class TestConcurrentOrders:

    @pytest.mark.asyncio
    async def test_concurrent_buys_sum_quantities(self, file_sessionmaker, market):
        (alice, _), stock_id = market
        quantities = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]

        await asyncio.gather(
            *(place(file_sessionmaker, alice, stock_id, OrderSide.BUY, q) for q in quantities)
        )

        async with file_sessionmaker() as session:
            holding = await trading.get_holding(session, alice, stock_id)
            account = await session.get(Account, alice)
            transactions = await session.scalar(
                select(func.count()).select_from(Transaction)
            )

        assert holding.quantity_owned == sum(quantities)
        assert holding.total_invested == Decimal("550.00")
        assert account.cash_balance == Decimal("450.00")
        assert transactions == len(quantities)

    @pytest.mark.asyncio
    async def test_concurrent_buys_never_overdraw(self, file_sessionmaker, market):
        """Twelve orders of 10 shares against 1,000.00: exactly ten can fill."""
        (alice, _), stock_id = market

        results = await asyncio.gather(
            *(place(file_sessionmaker, alice, stock_id, OrderSide.BUY, 10) for _ in range(12)),
            return_exceptions=True,
        )

        filled = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, InsufficientFunds)]
        assert len(filled) == 10
        assert len(rejected) == 2

        async with file_sessionmaker() as session:
            account = await session.get(Account, alice)
            holding = await trading.get_holding(session, alice, stock_id)
        assert account.cash_balance == Decimal("0.00")
        assert holding.quantity_owned == 100

    @pytest.mark.asyncio
    async def test_accounts_trade_independently(self, file_sessionmaker, market):
        (alice, bob), stock_id = market

        await asyncio.gather(
            *(place(file_sessionmaker, alice, stock_id, OrderSide.BUY, 5) for _ in range(4)),
            *(place(file_sessionmaker, bob, stock_id, OrderSide.BUY, 3) for _ in range(4)),
        )

        async with file_sessionmaker() as session:
            holdings = {
                h.account_id: h.quantity_owned
                for h in (await session.execute(select(Holding))).scalars()
            }
        assert holdings == {alice: 20, bob: 12}


class TestConcurrentCompetitionJoins:

    @pytest.mark.asyncio
    async def test_capacity_holds_across_accounts(self, file_sessionmaker, market):
        (alice, bob), _ = market
        async with file_sessionmaker() as session:
            competition = Competition(
                name="Sprint",
                start_date=datetime(2026, 1, 1),
                end_date=datetime(2026, 2, 1),
                entry_fee=Decimal("100.00"),
                max_participants=1,
            )
            session.add(competition)
            await session.commit()
            competition_id = competition.id

        async def join(account_id):
            async with file_sessionmaker() as session:
                return await competitions.join_competition(session, account_id, competition_id)

        results = await asyncio.gather(join(alice), join(bob), return_exceptions=True)

        assert len([r for r in results if isinstance(r, CompetitionParticipant)]) == 1
        assert len([r for r in results if isinstance(r, Conflict)]) == 1

        async with file_sessionmaker() as session:
            participants = await session.scalar(
                select(func.count()).select_from(CompetitionParticipant)
            )
            balances = sorted(
                a.cash_balance for a in (await session.execute(select(Account))).scalars()
            )
        assert participants == 1
        assert balances == [Decimal("900.00"), Decimal("1000.00")]
