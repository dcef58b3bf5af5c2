"""Community leaderboard ranked by ledger balance.

There is no stored points total to sort on: each user's score is the sum of
their ledger entries, computed in the same query that ranks them.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import case, func, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.db.models import LedgerEntry, User
from wastewise.points.errors import StoreUnavailable
from wastewise.points.projector import EARNING_KINDS
from wastewise.users.levels import compute_level

LEADERBOARD_SIZE = 10


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    user_id: int
    full_name: str
    city: str | None
    points: int
    level: int
    level_title: str


async def leaderboard(db: AsyncSession, limit: int = LEADERBOARD_SIZE) -> list[LeaderboardRow]:
    """Top recyclers by current balance; ties go to the earlier account.

    Staff and banned accounts are not ranked. Users with no entries score 0.
    """
    points = func.coalesce(func.sum(LedgerEntry.points), 0).label("points")
    earned = func.coalesce(
        func.sum(case((LedgerEntry.kind.in_(EARNING_KINDS), LedgerEntry.points), else_=0)), 0
    ).label("earned")
    stmt = (
        select(User.id, User.full_name, User.city, points, earned)
        .outerjoin(LedgerEntry, LedgerEntry.user_id == User.id)
        .where(User.is_staff.is_(False), User.is_banned.is_(False))
        .group_by(User.id, User.full_name, User.city)
        .order_by(points.desc(), User.id.asc())
        .limit(limit)
    )
    try:
        result = await db.execute(stmt)
    except (DBAPIError, PoolTimeoutError) as exc:
        raise StoreUnavailable("The points ledger is temporarily unavailable. Please retry.") from exc

    rows = []
    for rank, row in enumerate(result.all(), start=1):
        level = compute_level(int(row.earned))
        rows.append(
            LeaderboardRow(
                rank=rank,
                user_id=row.id,
                full_name=row.full_name,
                city=row.city,
                points=int(row.points),
                level=level["level"],
                level_title=level["title"],
            )
        )
    return rows
