"""Competition service - joining competitions and ranking participants."""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import and_, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.errors import Conflict, InsufficientFunds, NotFound
from simtrader.models import (
    Account,
    Competition,
    CompetitionParticipant,
    CompetitionStatus,
)
from simtrader.services.trading import account_lock

logger = logging.getLogger(__name__)

JOINABLE_STATUSES = (CompetitionStatus.UPCOMING, CompetitionStatus.ACTIVE)

# competition_id -> lock; entries disappear once no request holds the lock
_competition_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


def competition_lock(competition_id: int) -> asyncio.Lock:
    """Get the lock serializing joins to a competition."""
    lock = _competition_locks.get(competition_id)
    if lock is None:
        lock = asyncio.Lock()
        _competition_locks[competition_id] = lock
    return lock


@dataclass
class LeaderboardEntry:
    rank: int
    account_id: str
    username: str
    current_portfolio_value: Decimal
    total_return: Decimal
    return_percentage: Decimal


async def get_competitions(session: AsyncSession) -> list[Competition]:
    """Get all competitions ordered by start date."""
    result = await session.execute(
        select(Competition).order_by(Competition.start_date, Competition.id)
    )
    return list(result.scalars().all())


async def _require_competition(session: AsyncSession, competition_id: int) -> Competition:
    result = await session.execute(
        select(Competition).where(Competition.id == competition_id)
    )
    competition = result.scalar_one_or_none()
    if competition is None:
        raise NotFound(f"Competition '{competition_id}' not found")
    return competition


async def join_competition(
    session: AsyncSession, account_id: str, competition_id: int
) -> CompetitionParticipant:
    """Enter the account into a competition, paying the entry fee.

    Raises:
        NotFound: If the competition does not exist
        Conflict: If already joined, the competition is full, or it is
            no longer open for entry
        InsufficientFunds: If the balance does not cover the entry fee
    """
    # Lock order: competition, then account
    async with competition_lock(competition_id), account_lock(account_id):
        competition = await _require_competition(session, competition_id)

        if competition.status not in JOINABLE_STATUSES:
            raise Conflict("Competition is not open for registration")

        joined = await session.execute(
            select(CompetitionParticipant.id).where(
                and_(
                    CompetitionParticipant.competition_id == competition_id,
                    CompetitionParticipant.account_id == account_id,
                )
            )
        )
        if joined.scalar_one_or_none() is not None:
            raise Conflict("Already joined this competition")

        if competition.max_participants is not None:
            count = await session.scalar(
                select(func.count(CompetitionParticipant.id)).where(
                    CompetitionParticipant.competition_id == competition_id
                )
            )
            if count >= competition.max_participants:
                raise Conflict("Competition is full")

        result = await session.execute(
            select(Account)
            .where(Account.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one()
        if competition.entry_fee > account.cash_balance:
            raise InsufficientFunds(competition.entry_fee, account.cash_balance)
        account.cash_balance -= competition.entry_fee

        participant = CompetitionParticipant(
            competition_id=competition_id,
            account_id=account_id,
            virtual_balance=competition.initial_balance,
            current_portfolio_value=competition.initial_balance,
            joined_at=datetime.now(UTC).replace(tzinfo=None),
        )
        session.add(participant)
        await session.commit()
        await session.refresh(participant)

    logger.info(
        "Competition joined",
        extra={
            "account_id": account_id,
            "competition_id": competition_id,
            "entry_fee": float(competition.entry_fee),
        },
    )
    return participant


async def get_my_competitions(
    session: AsyncSession, account_id: str
) -> list[tuple[CompetitionParticipant, Competition]]:
    """Get the account's participations with their competitions, newest entry first."""
    result = await session.execute(
        select(CompetitionParticipant, Competition)
        .join(Competition, CompetitionParticipant.competition_id == Competition.id)
        .where(CompetitionParticipant.account_id == account_id)
        .order_by(desc(CompetitionParticipant.joined_at))
    )
    return [tuple(row) for row in result.all()]


async def get_leaderboard(
    session: AsyncSession, competition_id: int
) -> list[LeaderboardEntry]:
    """Rank participants by current portfolio value.

    Ranks are recomputed and stored on every read; ties keep join order.

    Raises:
        NotFound: If the competition does not exist
    """
    await _require_competition(session, competition_id)

    result = await session.execute(
        select(CompetitionParticipant, Account.username)
        .join(Account, CompetitionParticipant.account_id == Account.id)
        .where(CompetitionParticipant.competition_id == competition_id)
        .order_by(
            desc(CompetitionParticipant.current_portfolio_value),
            CompetitionParticipant.joined_at,
            CompetitionParticipant.id,
        )
    )
    rows = result.all()

    entries = []
    for rank, (participant, username) in enumerate(rows, start=1):
        participant.rank = rank
        entries.append(
            LeaderboardEntry(
                rank=rank,
                account_id=participant.account_id,
                username=username,
                current_portfolio_value=participant.current_portfolio_value,
                total_return=participant.total_return,
                return_percentage=participant.return_percentage,
            )
        )
    await session.commit()
    return entries
