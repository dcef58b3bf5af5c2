"""Pickup scheduling and lifecycle.

Every transition runs inside the pickup owner's ledger transaction and
re-reads the pickup row under lock, so a completion can award points only
once even when two operators submit it at the same time.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.config import get_settings
from wastewise.db.models import WastePickup
from wastewise.pickups.state_machine import (
    WASTE_TYPES,
    compute_points,
    parse_weight,
    validate_transition,
)
from wastewise.points.errors import InsufficientPoints, NotFound, ValidationError
from wastewise.points.ledger import append, user_transaction
from wastewise.points.projector import balance_of
from wastewise.time_utils import utcnow

logger = structlog.get_logger()

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _scheduled_at(pickup_date: date, pickup_time: str) -> datetime:
    if not _TIME_RE.match(pickup_time):
        raise ValidationError("pickup_time must be HH:MM (24h)")
    hour, minute = (int(part) for part in pickup_time.split(":"))
    return datetime.combine(pickup_date, time(hour, minute), tzinfo=timezone.utc)


async def get_pickup(db: AsyncSession, pickup_id: int, *, for_update: bool = False) -> WastePickup | None:
    """Get a pickup by ID, optionally locking the row."""
    stmt = select(WastePickup).where(WastePickup.id == pickup_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _get_owned(db: AsyncSession, pickup_id: int, user_id: int | None) -> WastePickup:
    pickup = await get_pickup(db, pickup_id)
    if pickup is None or (user_id is not None and pickup.user_id != user_id):
        raise NotFound(f"Pickup {pickup_id} not found")
    return pickup


async def list_pickups(db: AsyncSession, user_id: int) -> list[WastePickup]:
    """The user's pickups, latest pickup date first."""
    result = await db.execute(
        select(WastePickup)
        .where(WastePickup.user_id == user_id)
        .order_by(WastePickup.pickup_date.desc(), WastePickup.id.desc())
    )
    return list(result.scalars().all())


async def schedule_pickup(
    db: AsyncSession,
    user_id: int,
    *,
    pickup_date: date,
    pickup_time: str,
    waste_type: str,
    pickup_address: str,
    estimated_weight_kg: Decimal | float | None = None,
    special_instructions: str | None = None,
    emergency: bool = False,
    now: datetime | None = None,
) -> WastePickup:
    """Create a ``scheduled`` pickup.

    Emergency pickups must fall within the emergency window and are charged
    the emergency fee as a ``spent`` entry in the same transaction.
    """
    settings = get_settings()
    now = now or utcnow()

    if waste_type not in WASTE_TYPES:
        raise ValidationError(f"Unknown waste type: {waste_type}")
    if not pickup_address.strip():
        raise ValidationError("pickup_address is required")
    scheduled_at = _scheduled_at(pickup_date, pickup_time)
    if pickup_date < now.date():
        raise ValidationError("pickup_date cannot be in the past")
    estimate = parse_weight(estimated_weight_kg) if estimated_weight_kg is not None else None

    fee = 0
    if emergency:
        window = timedelta(hours=settings.emergency_window_hours)
        if scheduled_at > now + window:
            raise ValidationError(
                f"Emergency pickup must be within the next {settings.emergency_window_hours} hours"
            )
        fee = settings.emergency_fee_points
        special_instructions = f"EMERGENCY PICKUP: {special_instructions or ''}".strip()

    async with user_transaction(db, user_id):
        if fee:
            balance = await balance_of(db, user_id)
            if balance < fee:
                raise InsufficientPoints(fee, balance)

        pickup = WastePickup(
            user_id=user_id,
            status="scheduled",
            waste_type=waste_type,
            pickup_date=pickup_date,
            pickup_time=pickup_time,
            pickup_address=pickup_address,
            special_instructions=special_instructions,
            estimated_weight_kg=estimate,
            is_emergency=emergency,
            emergency_fee_points=fee,
            created_at=now,
            updated_at=now,
        )
        db.add(pickup)
        await db.flush()

        if fee:
            await append(
                db,
                user_id,
                "spent",
                -fee,
                reference_type="pickup",
                reference_id=pickup.id,
                description="Emergency pickup fee",
            )

    logger.info(
        "pickup_scheduled",
        user_id=user_id,
        pickup_id=pickup.id,
        waste_type=waste_type,
        emergency=emergency,
    )
    return pickup


async def start_pickup(db: AsyncSession, pickup_id: int, driver_id: int | None = None) -> WastePickup:
    """scheduled -> in_progress once a driver is assigned. No point effect."""
    owner = (await _get_owned(db, pickup_id, None)).user_id
    async with user_transaction(db, owner):
        pickup = await get_pickup(db, pickup_id, for_update=True)
        validate_transition(pickup.status, "in_progress")
        pickup.status = "in_progress"
        pickup.driver_id = driver_id
        pickup.updated_at = utcnow()
        await db.flush()

    logger.info("pickup_started", pickup_id=pickup_id, driver_id=driver_id)
    return pickup


async def cancel_pickup(db: AsyncSession, pickup_id: int, user_id: int | None = None) -> WastePickup:
    """scheduled|in_progress -> cancelled. Cancelling a cancelled pickup is a no-op.

    When ``user_id`` is given the pickup must belong to that user.
    """
    owner = (await _get_owned(db, pickup_id, user_id)).user_id
    async with user_transaction(db, owner):
        pickup = await get_pickup(db, pickup_id, for_update=True)
        if pickup.status == "cancelled":
            return pickup
        validate_transition(pickup.status, "cancelled")
        pickup.status = "cancelled"
        pickup.updated_at = utcnow()
        await db.flush()

    logger.info("pickup_cancelled", pickup_id=pickup_id, user_id=owner)
    return pickup


async def complete_pickup(
    db: AsyncSession,
    pickup_id: int,
    actual_weight_kg: Decimal | float | str | None,
    driver_notes: str | None = None,
) -> WastePickup:
    """in_progress -> completed, awarding ``weight * rate`` points exactly once.

    A second completion raises InvalidTransition and writes nothing.
    """
    owner = (await _get_owned(db, pickup_id, None)).user_id
    async with user_transaction(db, owner):
        pickup = await get_pickup(db, pickup_id, for_update=True)
        validate_transition(pickup.status, "completed")
        weight = parse_weight(actual_weight_kg)
        points = compute_points(pickup.waste_type, weight)

        if points > 0:
            await append(
                db,
                owner,
                "earned",
                points,
                reference_type="pickup",
                reference_id=pickup.id,
                description=f"Pickup completed: {weight} kg {pickup.waste_type}",
            )

        now = utcnow()
        pickup.status = "completed"
        pickup.actual_weight_kg = weight
        pickup.points_awarded = points
        pickup.driver_notes = driver_notes
        pickup.completed_at = now
        pickup.updated_at = now
        await db.flush()

    logger.info(
        "pickup_completed",
        pickup_id=pickup_id,
        user_id=owner,
        weight_kg=str(weight),
        points_awarded=points,
    )
    return pickup
