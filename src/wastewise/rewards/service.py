"""Rewards catalog and the redemption coordinator.

Rules:
- A redemption spends ``points_required`` as one ``redeemed`` ledger entry
- Entry, redemption row and counter increment commit together or not at all
- ``current_redemptions`` never exceeds ``max_redemptions`` (when set)
- Redemptions expire ``redemption_expiry_days`` (30) after redeeming for every
  reward; ``Reward.expiry_days`` is catalog metadata only
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.config import get_settings
from wastewise.db.models import Redemption, Reward
from wastewise.points.errors import InsufficientPoints, InvalidTransition, NotFound, SoldOut, ValidationError
from wastewise.points.ledger import append, user_transaction
from wastewise.points.projector import balance_of
from wastewise.rewards.codes import generate_unique_redemption_code, normalize_redemption_code
from wastewise.time_utils import as_utc, utcnow

logger = structlog.get_logger()

REWARD_TYPES = frozenset({"discount", "voucher", "product", "cashback"})

REDEMPTION_TRANSITIONS: dict[str, list[str]] = {
    "active": ["used", "expired"],
    "used": [],
    "expired": [],
}


def validate_redemption_transition(current_status: str, target_status: str) -> None:
    """Raise InvalidTransition unless ``current_status -> target_status`` is allowed."""
    valid = REDEMPTION_TRANSITIONS.get(current_status, [])
    if target_status not in valid:
        raise InvalidTransition(
            f"Invalid redemption transition: {current_status} -> {target_status}"
        )


def effective_status(redemption: Redemption, now: datetime | None = None) -> str:
    """Status as the user should see it: active codes past expiry read as expired."""
    now = now or utcnow()
    if redemption.status == "active" and as_utc(redemption.expiry_date) <= now:
        return "expired"
    return redemption.status


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


async def list_rewards(db: AsyncSession) -> list[Reward]:
    """Active rewards, cheapest first."""
    result = await db.execute(
        select(Reward)
        .where(Reward.is_active.is_(True))
        .order_by(Reward.points_required.asc(), Reward.id.asc())
    )
    return list(result.scalars().all())


async def get_reward(db: AsyncSession, reward_id: int) -> Reward | None:
    """Get a reward by ID, re-reading it from the database."""
    result = await db.execute(
        select(Reward)
        .where(Reward.id == reward_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_reward(
    db: AsyncSession,
    title: str,
    points_required: int,
    *,
    description: str | None = None,
    reward_type: str = "voucher",
    value_amount: Decimal | None = None,
    vendor_name: str | None = None,
    terms_conditions: str | None = None,
    expiry_days: int = 30,
    max_redemptions: int | None = None,
    is_active: bool = True,
) -> Reward:
    """Add a reward to the catalog."""
    if points_required <= 0:
        raise ValidationError("points_required must be positive")
    if max_redemptions is not None and max_redemptions < 1:
        raise ValidationError("max_redemptions must be at least 1 when set")
    if expiry_days < 1:
        raise ValidationError("expiry_days must be at least 1")
    if reward_type not in REWARD_TYPES:
        raise ValidationError(f"Unknown reward type: {reward_type}")

    now = utcnow()
    reward = Reward(
        title=title,
        description=description,
        points_required=points_required,
        reward_type=reward_type,
        value_amount=value_amount,
        vendor_name=vendor_name,
        terms_conditions=terms_conditions,
        expiry_days=expiry_days,
        max_redemptions=max_redemptions,
        current_redemptions=0,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(reward)
    await db.flush()
    logger.info("reward_created", reward_id=reward.id, title=title, points_required=points_required)
    return reward


# ---------------------------------------------------------------------------
# Redemption
# ---------------------------------------------------------------------------


async def redeem(db: AsyncSession, user_id: int, reward_id: int) -> Redemption:
    """Spend points on a reward and issue a redemption code.

    Raises NotFound, SoldOut, InsufficientPoints, or StoreUnavailable. On any
    failure no ledger entry, redemption or counter change is left behind.
    """
    async with user_transaction(db, user_id):
        reward = await get_reward(db, reward_id)
        if reward is None or not reward.is_active:
            raise NotFound(f"Reward {reward_id} not found")
        if reward.max_redemptions is not None and reward.current_redemptions >= reward.max_redemptions:
            raise SoldOut(f"Reward '{reward.title}' is sold out")

        balance = await balance_of(db, user_id)
        if balance < reward.points_required:
            raise InsufficientPoints(reward.points_required, balance)

        entry = await append(
            db,
            user_id,
            "redeemed",
            -reward.points_required,
            reference_type="reward",
            reference_id=reward.id,
            description=f"Redeemed: {reward.title}",
        )

        # Guarded increment: another user may have taken the last slot.
        now = utcnow()
        claimed = await db.execute(
            update(Reward)
            .where(
                Reward.id == reward.id,
                or_(
                    Reward.max_redemptions.is_(None),
                    Reward.current_redemptions < Reward.max_redemptions,
                ),
            )
            .values(current_redemptions=Reward.current_redemptions + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            raise SoldOut(f"Reward '{reward.title}' is sold out")

        redemption = Redemption(
            user_id=user_id,
            reward_id=reward.id,
            redemption_code=await generate_unique_redemption_code(db),
            status="active",
            redeemed_at=now,
            expiry_date=now + timedelta(days=get_settings().redemption_expiry_days),
            ledger_entry_id=entry.id,
        )
        redemption.reward = reward
        db.add(redemption)
        await db.flush()

    await db.refresh(reward, attribute_names=["current_redemptions", "updated_at"])
    logger.info(
        "reward_redeemed",
        user_id=user_id,
        reward_id=reward.id,
        redemption_id=redemption.id,
        points=reward.points_required,
        balance_after=balance - reward.points_required,
    )
    return redemption


async def list_user_redemptions(db: AsyncSession, user_id: int) -> list[Redemption]:
    """The user's redemptions, newest first."""
    result = await db.execute(
        select(Redemption)
        .where(Redemption.user_id == user_id)
        .order_by(Redemption.redeemed_at.desc(), Redemption.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.unique().scalars().all())


async def use_redemption(db: AsyncSession, user_id: int, code: str) -> Redemption:
    """Mark an active redemption as used.

    Raises NotFound for unknown codes and InvalidTransition when the code is
    already used or has expired (a lapsed code is marked expired first).
    """
    lookup = normalize_redemption_code(code)
    lapsed = False
    async with user_transaction(db, user_id):
        result = await db.execute(
            select(Redemption)
            .where(Redemption.redemption_code == lookup, Redemption.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        redemption = result.unique().scalar_one_or_none()
        if redemption is None:
            raise NotFound("Redemption code not found")

        now = utcnow()
        if effective_status(redemption, now) == "expired" and redemption.status == "active":
            redemption.status = "expired"
            lapsed = True
        else:
            validate_redemption_transition(redemption.status, "used")
            redemption.status = "used"
            redemption.used_at = now
        await db.flush()

    if lapsed:
        raise InvalidTransition("Redemption code has expired")
    logger.info("redemption_used", user_id=user_id, redemption_id=redemption.id)
    return redemption


async def expire_redemptions(db: AsyncSession, now: datetime | None = None) -> int:
    """Move every lapsed active redemption to ``expired``. Returns the count."""
    now = now or utcnow()
    result = await db.execute(
        update(Redemption)
        .where(Redemption.status == "active", Redemption.expiry_date <= now)
        .values(status="expired")
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    count = result.rowcount or 0
    if count:
        logger.info("redemptions_expired", count=count)
    return count
