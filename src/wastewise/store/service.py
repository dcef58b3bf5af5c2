"""Eco store: utilities bought with points.

Delivery progression: pending -> confirmed -> shipped -> delivered
pending and confirmed orders may be cancelled; cancelling refunds the points
spent exactly once.
"""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.db.models import Utility, UtilityPurchase
from wastewise.points.errors import InsufficientPoints, InvalidTransition, NotFound, ValidationError
from wastewise.points.ledger import append, user_transaction
from wastewise.points.projector import balance_of
from wastewise.time_utils import utcnow

logger = structlog.get_logger()

DELIVERY_TRANSITIONS: dict[str, list[str]] = {
    "pending": ["confirmed", "cancelled"],
    "confirmed": ["shipped", "cancelled"],
    "shipped": ["delivered"],
    "delivered": [],
    "cancelled": [],
}

MAX_QUANTITY = 10


def validate_delivery_transition(current_status: str, target_status: str) -> None:
    """Raise InvalidTransition unless the delivery status change is allowed."""
    valid = DELIVERY_TRANSITIONS.get(current_status, [])
    if target_status not in valid:
        raise InvalidTransition(
            f"Invalid delivery transition: {current_status} -> {target_status}. "
            f"Valid transitions: {valid}"
        )


async def list_utilities(db: AsyncSession) -> list[Utility]:
    """Active catalog items by name."""
    result = await db.execute(
        select(Utility).where(Utility.is_active.is_(True)).order_by(Utility.name.asc())
    )
    return list(result.scalars().all())


async def list_purchases(db: AsyncSession, user_id: int) -> list[UtilityPurchase]:
    """The user's orders, newest first."""
    result = await db.execute(
        select(UtilityPurchase)
        .where(UtilityPurchase.user_id == user_id)
        .order_by(UtilityPurchase.created_at.desc(), UtilityPurchase.id.desc())
    )
    return list(result.unique().scalars().all())


async def purchase_utility(
    db: AsyncSession,
    user_id: int,
    utility_id: int,
    quantity: int,
    delivery_address: str,
) -> UtilityPurchase:
    """Buy ``quantity`` of a utility with points.

    The ``spent`` entry and the order row commit together.
    """
    if quantity < 1 or quantity > MAX_QUANTITY:
        raise ValidationError(f"quantity must be between 1 and {MAX_QUANTITY}")
    if not delivery_address.strip():
        raise ValidationError("delivery_address is required")

    async with user_transaction(db, user_id):
        utility = await db.get(Utility, utility_id, populate_existing=True)
        if utility is None or not utility.is_active:
            raise NotFound(f"Utility {utility_id} not found")
        if utility.availability_status != "available":
            raise ValidationError(f"'{utility.name}' is {utility.availability_status.replace('_', ' ')}")

        total = utility.price_points * quantity
        balance = await balance_of(db, user_id)
        if balance < total:
            raise InsufficientPoints(total, balance)

        now = utcnow()
        purchase = UtilityPurchase(
            user_id=user_id,
            utility_id=utility.id,
            quantity=quantity,
            points_spent=total,
            delivery_address=delivery_address,
            delivery_status="pending",
            created_at=now,
            updated_at=now,
        )
        purchase.utility = utility
        db.add(purchase)
        await db.flush()

        entry = await append(
            db,
            user_id,
            "spent",
            -total,
            reference_type="purchase",
            reference_id=purchase.id,
            description=f"Eco store: {quantity} x {utility.name}",
        )
        purchase.ledger_entry_id = entry.id
        await db.flush()

    logger.info("utility_purchased", user_id=user_id, purchase_id=purchase.id, points=total)
    return purchase


async def advance_delivery(
    db: AsyncSession,
    purchase_id: int,
    status: str,
    tracking_number: str | None = None,
) -> UtilityPurchase:
    """Move an order along its delivery lifecycle; cancellation refunds the points."""
    existing = await db.get(UtilityPurchase, purchase_id)
    if existing is None:
        raise NotFound(f"Purchase {purchase_id} not found")

    async with user_transaction(db, existing.user_id):
        result = await db.execute(
            select(UtilityPurchase)
            .where(UtilityPurchase.id == purchase_id)
            .with_for_update(of=UtilityPurchase)
            .execution_options(populate_existing=True)
        )
        purchase = result.unique().scalar_one()
        validate_delivery_transition(purchase.delivery_status, status)

        if status == "cancelled" and purchase.refund_entry_id is None:
            refund = await append(
                db,
                purchase.user_id,
                "refund",
                purchase.points_spent,
                reference_type="purchase",
                reference_id=purchase.id,
                description="Eco store order cancelled",
            )
            purchase.refund_entry_id = refund.id

        purchase.delivery_status = status
        if tracking_number:
            purchase.tracking_number = tracking_number
        purchase.updated_at = utcnow()
        await db.flush()

    logger.info("delivery_status_changed", purchase_id=purchase_id, status=status)
    return purchase
