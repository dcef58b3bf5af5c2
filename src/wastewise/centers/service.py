"""Recycling center directory."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.db.models import RecyclingCenter
from wastewise.pickups.state_machine import WASTE_TYPES
from wastewise.points.errors import NotFound, ValidationError
from wastewise.time_utils import utcnow

logger = structlog.get_logger()


def _normalize_waste_types(waste_types: list[str]) -> list[str]:
    unknown = sorted(set(waste_types) - WASTE_TYPES)
    if unknown:
        raise ValidationError(f"Unknown waste types: {', '.join(unknown)}")
    # Keep first-seen order, drop repeats.
    return list(dict.fromkeys(waste_types))


async def list_centers(db: AsyncSession, waste_type: str | None = None) -> list[RecyclingCenter]:
    """Active centers by name, optionally only those accepting ``waste_type``.

    The accepted-types filter runs here rather than in SQL because the column
    is JSONB on PostgreSQL and JSON text on SQLite.
    """
    if waste_type is not None and waste_type not in WASTE_TYPES:
        raise ValidationError(f"Unknown waste type: {waste_type}")

    result = await db.execute(
        select(RecyclingCenter)
        .where(RecyclingCenter.is_active.is_(True))
        .order_by(RecyclingCenter.name.asc(), RecyclingCenter.id.asc())
    )
    centers = list(result.scalars().all())
    if waste_type is None:
        return centers
    return [c for c in centers if waste_type in (c.waste_types_accepted or [])]


async def get_center(db: AsyncSession, center_id: int) -> RecyclingCenter:
    center = await db.get(RecyclingCenter, center_id)
    if center is None or not center.is_active:
        raise NotFound(f"Recycling center {center_id} not found")
    return center


async def create_center(
    db: AsyncSession,
    name: str,
    address: str,
    city: str,
    state: str,
    pincode: str,
    waste_types_accepted: list[str],
    *,
    latitude: Decimal | None = None,
    longitude: Decimal | None = None,
    phone: str | None = None,
    email: str | None = None,
    operating_hours: dict[str, Any] | None = None,
    capacity_tons: Decimal = Decimal("0"),
    rating: Decimal = Decimal("0"),
    is_active: bool = True,
) -> RecyclingCenter:
    """Add a center to the directory."""
    if not name.strip():
        raise ValidationError("name is required")
    if capacity_tons < 0:
        raise ValidationError("capacity_tons must not be negative")
    if not Decimal("0") <= rating <= Decimal("5"):
        raise ValidationError("rating must be between 0 and 5")

    now = utcnow()
    center = RecyclingCenter(
        name=name.strip(),
        address=address,
        city=city,
        state=state,
        pincode=pincode,
        latitude=latitude,
        longitude=longitude,
        phone=phone,
        email=email,
        operating_hours=operating_hours,
        waste_types_accepted=_normalize_waste_types(waste_types_accepted),
        capacity_tons=capacity_tons,
        current_load_tons=Decimal("0"),
        rating=rating,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(center)
    await db.flush()
    logger.info("recycling_center_created", center_id=center.id, city=city)
    return center
