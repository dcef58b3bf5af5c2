"""Ledger store and balance projector tests against a real database."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select

from wastewise.database import get_session_factory
from wastewise.db.models import LedgerEntry, PointAccount
from wastewise.points.errors import StoreUnavailable, ValidationError
from wastewise.points.ledger import _lock_for, append, entries_for_user, recent_entries, user_transaction
from wastewise.points.projector import balance_of, fold, summary_of
from wastewise.time_utils import utcnow


class TestAppend:
    async def test_balance_equals_sum_of_entries(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        await grant_points(user.id, 40, kind="earned")
        async with user_transaction(db_session, user.id):
            await append(db_session, user.id, "penalty", -15)

        entries = await entries_for_user(db_session, user.id)
        assert [e.points for e in entries] == [100, 40, -15]
        assert await balance_of(db_session, user.id) == fold(entries) == 125

    async def test_append_outside_transaction_raises(self, db_session, user):
        with pytest.raises(RuntimeError, match="user_transaction"):
            await append(db_session, user.id, "earned", 10)

    async def test_overdraw_rejected(self, db_session, user, grant_points):
        await grant_points(user.id, 30)
        with pytest.raises(ValidationError, match="overdraw"):
            async with user_transaction(db_session, user.id):
                await append(db_session, user.id, "penalty", -31)
        assert await balance_of(db_session, user.id) == 30

    async def test_wrong_sign_rejected(self, db_session, user):
        with pytest.raises(ValidationError):
            async with user_transaction(db_session, user.id):
                await append(db_session, user.id, "earned", -10)

    async def test_failed_block_rolls_back_every_write(self, db_session, user, grant_points):
        """Nothing appended inside a failed block survives."""
        await grant_points(user.id, 50)
        with pytest.raises(ZeroDivisionError):
            async with user_transaction(db_session, user.id):
                await append(db_session, user.id, "earned", 20)
                1 / 0  # noqa: B018
        count = await db_session.scalar(
            select(func.count()).select_from(LedgerEntry).where(LedgerEntry.user_id == user.id)
        )
        assert count == 1
        assert await balance_of(db_session, user.id) == 50

    async def test_account_tracks_last_entry(self, db_session, user, grant_points):
        entry = await grant_points(user.id, 10)
        account = await db_session.get(PointAccount, user.id, populate_existing=True)
        assert account.last_entry_id == entry.id

    async def test_unknown_reference_type(self, db_session, user):
        with pytest.raises(ValidationError, match="reference type"):
            async with user_transaction(db_session, user.id):
                await append(db_session, user.id, "earned", 10, reference_type="lottery", reference_id=1)


class TestUserTransaction:
    async def test_lock_timeout_raises_store_unavailable(self, db_session, user):
        lock = _lock_for(user.id)
        await lock.acquire()
        try:
            with pytest.raises(StoreUnavailable):
                async with user_transaction(db_session, user.id, timeout=0.05):
                    pass
        finally:
            lock.release()

    async def test_lock_released_after_block(self, db_session, user, grant_points):
        await grant_points(user.id, 10)
        async with user_transaction(db_session, user.id):
            pass
        assert not _lock_for(user.id).locked()

    async def test_creates_missing_account_row(self, db_session, user):
        await db_session.delete(await db_session.get(PointAccount, user.id))
        await db_session.commit()
        async with user_transaction(db_session, user.id) as account:
            assert account.user_id == user.id


class TestProjector:
    async def test_empty_ledger(self, db_session, user):
        assert await balance_of(db_session, user.id) == 0

    async def test_balance_as_of(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        await asyncio.sleep(0.01)
        midpoint = utcnow()
        await asyncio.sleep(0.01)
        await grant_points(user.id, 25)

        assert await balance_of(db_session, user.id, as_of=midpoint) == 100
        assert await balance_of(db_session, user.id) == 125
        assert [e.points for e in await entries_for_user(db_session, user.id, before=midpoint)] == [100]

    async def test_balances_are_per_user(self, db_session, make_user, grant_points):
        alice = await make_user("alice@wastewise.io")
        bob = await make_user("bob@wastewise.io")
        await grant_points(alice.id, 70)
        await grant_points(bob.id, 5)
        assert await balance_of(db_session, alice.id) == 70
        assert await balance_of(db_session, bob.id) == 5

    async def test_summary_nets_refunds(self, db_session, user, grant_points):
        await grant_points(user.id, 200, kind="earned")
        async with user_transaction(db_session, user.id):
            await append(db_session, user.id, "spent", -60, reference_type="purchase", reference_id=1)
        await grant_points(user.id, 60, kind="refund")

        summary = await summary_of(db_session, user.id)
        assert summary.balance == 200
        assert summary.lifetime_earned == 200
        assert summary.lifetime_spent == 0
        assert summary.last_entry_id is not None

    async def test_recent_entries_newest_first(self, db_session, user, grant_points):
        for points in (1, 2, 3):
            await grant_points(user.id, points)
        entries = await recent_entries(db_session, user.id, limit=2)
        assert [e.points for e in entries] == [3, 2]


class TestConcurrentAppends:
    async def test_parallel_debits_never_overdraw(self, user, grant_points):
        """Five parallel 30-point debits against 100 points: three succeed."""
        await grant_points(user.id, 100)
        factory = get_session_factory()

        async def debit() -> bool:
            async with factory() as db:
                try:
                    async with user_transaction(db, user.id):
                        await append(db, user.id, "penalty", -30)
                except ValidationError:
                    return False
                return True

        results = await asyncio.gather(*(debit() for _ in range(5)))
        assert results.count(True) == 3
        async with factory() as db:
            assert await balance_of(db, user.id) == 10
