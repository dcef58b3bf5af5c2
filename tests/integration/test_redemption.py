"""Redemption coordinator tests: atomic spend, cap enforcement, concurrency."""

from __future__ import annotations

import asyncio
import re
from datetime import timedelta

import pytest
from sqlalchemy import func, select, update

from wastewise.config import get_settings
from wastewise.database import get_session_factory
from wastewise.db.models import LedgerEntry, Redemption, Reward
from wastewise.points.errors import InsufficientPoints, InvalidTransition, NotFound, SoldOut, ValidationError
from wastewise.points.projector import balance_of
from wastewise.rewards.service import (
    create_reward,
    expire_redemptions,
    get_reward,
    list_rewards,
    list_user_redemptions,
    redeem,
    use_redemption,
)
from wastewise.time_utils import as_utc, utcnow


async def _reward(db, points_required: int = 80, **kwargs):
    reward = await create_reward(db, "Coffee voucher", points_required, **kwargs)
    await db.commit()
    return reward


async def _entry_count(db, user_id: int) -> int:
    return await db.scalar(select(func.count()).select_from(LedgerEntry).where(LedgerEntry.user_id == user_id))


class TestCatalog:
    async def test_list_orders_by_cost_and_hides_inactive(self, db_session):
        await create_reward(db_session, "Bike tune-up", 500)
        await create_reward(db_session, "Tote bag", 50)
        await create_reward(db_session, "Retired", 10, is_active=False)
        await db_session.commit()

        titles = [r.title for r in await list_rewards(db_session)]
        assert titles == ["Tote bag", "Bike tune-up"]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"points_required": 0},
            {"points_required": 10, "max_redemptions": 0},
            {"points_required": 10, "expiry_days": 0},
            {"points_required": 10, "reward_type": "lottery"},
        ],
    )
    async def test_create_validation(self, db_session, kwargs):
        with pytest.raises(ValidationError):
            await create_reward(db_session, "Bad reward", **kwargs)


class TestRedeem:
    async def test_redeem_spends_points_and_issues_code(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        reward = await _reward(db_session, 80, max_redemptions=1)

        redemption = await redeem(db_session, user.id, reward.id)

        assert re.fullmatch(r"WW[A-Z0-9]{10}", redemption.redemption_code)
        assert redemption.status == "active"
        assert as_utc(redemption.expiry_date) - as_utc(redemption.redeemed_at) == timedelta(days=30)
        assert await balance_of(db_session, user.id) == 20
        assert (await get_reward(db_session, reward.id)).current_redemptions == 1

        entry = await db_session.get(LedgerEntry, redemption.ledger_entry_id)
        assert entry.kind == "redeemed"
        assert entry.points == -80
        assert entry.reference_type == "reward"
        assert entry.reference_id == reward.id

    async def test_cap_reached_sold_out_for_everyone(self, db_session, make_user, grant_points):
        first = await make_user("first@wastewise.io")
        second = await make_user("second@wastewise.io")
        await grant_points(first.id, 100)
        await grant_points(second.id, 500)
        reward = await _reward(db_session, 80, max_redemptions=1)

        await redeem(db_session, first.id, reward.id)
        with pytest.raises(SoldOut):
            await redeem(db_session, second.id, reward.id)

        assert await balance_of(db_session, second.id) == 500
        assert await _entry_count(db_session, second.id) == 1

    async def test_insufficient_points_writes_nothing(self, db_session, user, grant_points):
        await grant_points(user.id, 79)
        reward = await _reward(db_session, 80)

        with pytest.raises(InsufficientPoints) as exc_info:
            await redeem(db_session, user.id, reward.id)

        assert exc_info.value.required == 80
        assert exc_info.value.balance == 79
        assert await _entry_count(db_session, user.id) == 1
        assert await list_user_redemptions(db_session, user.id) == []
        assert (await get_reward(db_session, reward.id)).current_redemptions == 0

    async def test_unknown_or_inactive_reward(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        inactive = await _reward(db_session, 10, is_active=False)
        with pytest.raises(NotFound):
            await redeem(db_session, user.id, 9999)
        with pytest.raises(NotFound):
            await redeem(db_session, user.id, inactive.id)

    async def test_expiry_ignores_reward_expiry_days(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        reward = await _reward(db_session, 10, expiry_days=7)
        redemption = await redeem(db_session, user.id, reward.id)
        assert as_utc(redemption.expiry_date) - as_utc(redemption.redeemed_at) == timedelta(days=30)

    async def test_expiry_window_from_settings(self, db_session, user, grant_points, monkeypatch):
        monkeypatch.setenv("WW_REDEMPTION_EXPIRY_DAYS", "14")
        get_settings.cache_clear()
        await grant_points(user.id, 100)
        reward = await _reward(db_session, 10)
        redemption = await redeem(db_session, user.id, reward.id)
        assert as_utc(redemption.expiry_date) - as_utc(redemption.redeemed_at) == timedelta(days=14)

    async def test_last_slot_taken_after_checks_rolls_back(self, db_session, user, grant_points, monkeypatch):
        """The cap is claimed by another writer after the pre-check: nothing is kept."""
        await grant_points(user.id, 100)
        reward = await _reward(db_session, 80, max_redemptions=1)

        async def balance_after_slot_taken(db, user_id, as_of=None):
            await db.execute(
                update(Reward)
                .where(Reward.id == reward.id)
                .values(current_redemptions=Reward.max_redemptions)
                .execution_options(synchronize_session=False)
            )
            return await balance_of(db, user_id, as_of)

        monkeypatch.setattr("wastewise.rewards.service.balance_of", balance_after_slot_taken)

        with pytest.raises(SoldOut):
            await redeem(db_session, user.id, reward.id)

        redeemed = await db_session.scalar(
            select(func.count())
            .select_from(LedgerEntry)
            .where(LedgerEntry.user_id == user.id, LedgerEntry.kind == "redeemed")
        )
        assert redeemed == 0
        assert await balance_of(db_session, user.id) == 100
        assert await list_user_redemptions(db_session, user.id) == []


class TestConcurrentRedemption:
    async def test_same_user_jointly_unaffordable(self, user, grant_points):
        """Two 60-point redemptions against 100 points: exactly one succeeds."""
        await grant_points(user.id, 100)
        factory = get_session_factory()
        async with factory() as db:
            reward = await _reward(db, 60)

        async def attempt():
            async with factory() as db:
                return await redeem(db, user.id, reward.id)

        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

        successes = [r for r in results if isinstance(r, Redemption)]
        failures = [r for r in results if isinstance(r, InsufficientPoints)]
        assert len(successes) == 1
        assert len(failures) == 1
        async with factory() as db:
            assert await balance_of(db, user.id) == 40
            assert (await get_reward(db, reward.id)).current_redemptions == 1


class TestUseRedemption:
    async def test_use_once(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        reward = await _reward(db_session, 10)
        redemption = await redeem(db_session, user.id, reward.id)

        used = await use_redemption(db_session, user.id, redemption.redemption_code.lower())
        assert used.status == "used"
        assert used.used_at is not None

        with pytest.raises(InvalidTransition):
            await use_redemption(db_session, user.id, redemption.redemption_code)

    async def test_other_users_code_not_found(self, db_session, make_user, grant_points):
        owner = await make_user("owner@wastewise.io")
        other = await make_user("other@wastewise.io")
        await grant_points(owner.id, 100)
        reward = await _reward(db_session, 10)
        redemption = await redeem(db_session, owner.id, reward.id)

        with pytest.raises(NotFound):
            await use_redemption(db_session, other.id, redemption.redemption_code)

    async def test_lapsed_code_expires(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        reward = await _reward(db_session, 10)
        redemption = await redeem(db_session, user.id, reward.id)
        redemption.expiry_date = utcnow() - timedelta(minutes=1)
        await db_session.commit()

        with pytest.raises(InvalidTransition, match="expired"):
            await use_redemption(db_session, user.id, redemption.redemption_code)

        stored = (await list_user_redemptions(db_session, user.id))[0]
        assert stored.status == "expired"


class TestExpireRedemptions:
    async def test_bulk_expiry(self, db_session, user, grant_points):
        await grant_points(user.id, 100)
        reward = await _reward(db_session, 10)
        await redeem(db_session, user.id, reward.id)
        await redeem(db_session, user.id, reward.id)

        count = await expire_redemptions(db_session, now=utcnow() + timedelta(days=31))
        assert count == 2

        statuses = {r.status for r in await list_user_redemptions(db_session, user.id)}
        assert statuses == {"expired"}

    async def test_nothing_to_expire(self, db_session):
        assert await expire_redemptions(db_session) == 0
