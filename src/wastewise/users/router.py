"""Profile endpoints. Points are read from the ledger, never written here."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_current_user
from wastewise.database import get_session
from wastewise.db.models import User
from wastewise.points.projector import summary_of
from wastewise.users.levels import compute_level
from wastewise.users.schemas import ProfileResponse, ProfileUpdateRequest

router = APIRouter(prefix="/api/v1", tags=["Users"])


async def _profile(db: AsyncSession, user: User) -> ProfileResponse:
    summary = await summary_of(db, user.id)
    level = compute_level(summary.lifetime_earned)
    return ProfileResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        phone=user.phone,
        address=user.address,
        city=user.city,
        user_type=user.user_type,
        created_at=user.created_at,
        balance=summary.balance,
        lifetime_earned=summary.lifetime_earned,
        lifetime_spent=summary.lifetime_spent,
        level=level["level"],
        level_title=level["title"],
        next_title=level["next_title"],
        points_to_next=level["points_to_next"],
    )


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Current user's profile with balance and level."""
    return await _profile(db, user)


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Update contact details."""
    for field, value in body.model_dump(exclude_unset=True).items():
        if field == "full_name" and value is None:
            continue
        setattr(user, field, value)
    await db.commit()
    return await _profile(db, user)
