"""Balance projection: a user's balance is the fold of their ledger entries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.db.models import LedgerEntry
from wastewise.points.errors import StoreUnavailable


# Kinds counted as earned for levels; refunds only give spending back.
EARNING_KINDS = ("earned", "bonus")


@dataclass(frozen=True)
class BalanceSummary:
    balance: int
    lifetime_earned: int
    lifetime_spent: int
    last_entry_id: int | None


def fold(entries: Iterable[LedgerEntry]) -> int:
    """Sum the points of ``entries``."""
    total = 0
    for entry in entries:
        total += entry.points
    return total


async def balance_of(db: AsyncSession, user_id: int, as_of: datetime | None = None) -> int:
    """Current balance of ``user_id``, or the balance just before ``as_of``.

    The fold runs in the database so the read sees every append committed
    (or flushed in this session) for the user.
    """
    stmt = select(func.coalesce(func.sum(LedgerEntry.points), 0)).where(LedgerEntry.user_id == user_id)
    if as_of is not None:
        stmt = stmt.where(LedgerEntry.created_at < as_of)
    try:
        result = await db.execute(stmt)
    except (DBAPIError, PoolTimeoutError) as exc:
        raise StoreUnavailable("The points ledger is temporarily unavailable. Please retry.") from exc
    return int(result.scalar_one())


async def summary_of(db: AsyncSession, user_id: int) -> BalanceSummary:
    """Balance plus lifetime earned/spent totals for the profile view.

    Refunds are netted against spending so a cancelled order does not count
    as earned points.
    """
    credit = case((LedgerEntry.kind.in_(EARNING_KINDS), LedgerEntry.points), else_=0)
    debit = case((LedgerEntry.points < 0, -LedgerEntry.points), else_=0)
    refund = case((LedgerEntry.kind == "refund", LedgerEntry.points), else_=0)
    try:
        result = await db.execute(
            select(
                func.coalesce(func.sum(LedgerEntry.points), 0),
                func.coalesce(func.sum(credit), 0),
                func.coalesce(func.sum(debit), 0),
                func.coalesce(func.sum(refund), 0),
                func.max(LedgerEntry.id),
            ).where(LedgerEntry.user_id == user_id)
        )
    except (DBAPIError, PoolTimeoutError) as exc:
        raise StoreUnavailable("The points ledger is temporarily unavailable. Please retry.") from exc
    balance, earned, spent, refunded, last_id = result.one()
    return BalanceSummary(
        balance=int(balance),
        lifetime_earned=int(earned),
        lifetime_spent=int(spent) - int(refunded),
        last_entry_id=last_id,
    )
