"""Append-only points ledger with per-user serialized transactions.

Every balance-affecting write runs inside ``user_transaction``: an in-process
lock keyed by user id plus ``SELECT ... FOR UPDATE`` on the user's
point_accounts row. The balance check and the append therefore observe the
last committed entry for that user, and all writes made inside the block
commit or roll back together.
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.config import get_settings
from wastewise.db.models import LedgerEntry, PointAccount
from wastewise.points.errors import StoreUnavailable, ValidationError
from wastewise.points.projector import balance_of

logger = structlog.get_logger()

CREDIT_KINDS = frozenset({"earned", "bonus", "refund"})
DEBIT_KINDS = frozenset({"redeemed", "penalty", "spent"})
ENTRY_KINDS = CREDIT_KINDS | DEBIT_KINDS
REFERENCE_TYPES = frozenset({"pickup", "reward", "purchase"})

# Locks live only while some task holds or awaits them.
_user_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()


def _lock_for(user_id: int) -> asyncio.Lock:
    lock = _user_locks.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _user_locks[user_id] = lock
    return lock


def validate_entry(kind: str, points: int) -> None:
    """Check the kind is known and the sign of ``points`` matches it."""
    if kind not in ENTRY_KINDS:
        raise ValidationError(f"Unknown ledger entry kind: {kind}")
    if not isinstance(points, int) or isinstance(points, bool):
        raise ValidationError("Ledger points must be an integer")
    if points == 0:
        raise ValidationError("Ledger entries must move a non-zero number of points")
    if kind in CREDIT_KINDS and points < 0:
        raise ValidationError(f"'{kind}' entries must be positive")
    if kind in DEBIT_KINDS and points > 0:
        raise ValidationError(f"'{kind}' entries must be negative")


async def _lock_account(db: AsyncSession, user_id: int, timeout: float) -> PointAccount:
    """Row-lock the user's anchor row, creating it on first use."""
    if db.get_bind().dialect.name == "postgresql":
        await db.execute(text(f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'"))

    result = await db.execute(
        select(PointAccount).where(PointAccount.user_id == user_id).with_for_update()
    )
    account = result.scalar_one_or_none()
    if account is None:
        account = PointAccount(user_id=user_id, updated_at=datetime.now(timezone.utc))
        db.add(account)
        await db.flush()
    return account


@asynccontextmanager
async def user_transaction(
    db: AsyncSession,
    user_id: int,
    timeout: float | None = None,
) -> AsyncIterator[PointAccount]:
    """Exclusive per-user critical section around a read-balance-then-append sequence.

    Commits when the block exits normally and rolls back on any exception.
    Raises StoreUnavailable if the lock is not obtained within ``timeout``
    seconds or the database fails; nothing is left half-written in that case.
    """
    wait = get_settings().ledger_lock_timeout_seconds if timeout is None else timeout
    lock = _lock_for(user_id)
    try:
        await asyncio.wait_for(lock.acquire(), timeout=wait)
    except TimeoutError:
        logger.warning("ledger_lock_timeout", user_id=user_id, timeout=wait)
        raise StoreUnavailable("Timed out waiting for the points ledger. Please retry.") from None

    try:
        try:
            account = await _lock_account(db, user_id, wait)
            yield account
            await db.commit()
        except (DBAPIError, PoolTimeoutError) as exc:
            await db.rollback()
            logger.warning("ledger_transaction_failed", user_id=user_id, error=str(exc))
            raise StoreUnavailable("The points ledger is temporarily unavailable. Please retry.") from exc
        except BaseException:
            await db.rollback()
            raise
    finally:
        lock.release()


async def append(
    db: AsyncSession,
    user_id: int,
    kind: str,
    points: int,
    *,
    reference_type: str | None = None,
    reference_id: int | None = None,
    description: str | None = None,
) -> LedgerEntry:
    """Append an immutable entry for ``user_id``.

    Must run inside ``user_transaction`` for the same user. Raises
    ValidationError on a malformed entry or when the entry would drive the
    balance below zero.
    """
    if not _lock_for(user_id).locked():
        msg = "append() must be called inside user_transaction() for the same user"
        raise RuntimeError(msg)

    validate_entry(kind, points)
    if reference_type is not None and reference_type not in REFERENCE_TYPES:
        raise ValidationError(f"Unknown reference type: {reference_type}")

    balance = await balance_of(db, user_id)
    if balance + points < 0:
        raise ValidationError(
            f"Entry of {points} points would overdraw balance of {balance}"
        )

    now = datetime.now(timezone.utc)
    entry = LedgerEntry(
        user_id=user_id,
        kind=kind,
        points=points,
        reference_type=reference_type,
        reference_id=reference_id,
        description=description,
        created_at=now,
    )
    db.add(entry)
    await db.flush()

    account = await db.get(PointAccount, user_id)
    if account is not None:
        account.last_entry_id = entry.id
        account.updated_at = now
        await db.flush()

    logger.info(
        "ledger_entry_appended",
        user_id=user_id,
        entry_id=entry.id,
        kind=kind,
        points=points,
        reference_type=reference_type,
        reference_id=reference_id,
    )
    return entry


async def entries_for_user(
    db: AsyncSession,
    user_id: int,
    before: datetime | None = None,
    limit: int | None = None,
) -> list[LedgerEntry]:
    """Return the user's entries oldest first, optionally only those created before ``before``."""
    stmt = select(LedgerEntry).where(LedgerEntry.user_id == user_id)
    if before is not None:
        stmt = stmt.where(LedgerEntry.created_at < before)
    stmt = stmt.order_by(LedgerEntry.created_at.asc(), LedgerEntry.id.asc())
    if limit is not None:
        stmt = stmt.limit(limit)
    try:
        result = await db.execute(stmt)
    except (DBAPIError, PoolTimeoutError) as exc:
        raise StoreUnavailable("The points ledger is temporarily unavailable. Please retry.") from exc
    return list(result.scalars().all())


async def recent_entries(db: AsyncSession, user_id: int, limit: int = 50) -> list[LedgerEntry]:
    """Return the user's most recent entries, newest first."""
    try:
        result = await db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.user_id == user_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
        )
    except (DBAPIError, PoolTimeoutError) as exc:
        raise StoreUnavailable("The points ledger is temporarily unavailable. Please retry.") from exc
    return list(result.scalars().all())
