"""Rewards API endpoints: catalog, redeem, and the user's redemptions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_current_user, get_staff_user
from wastewise.database import get_session
from wastewise.db.models import Redemption, User
from wastewise.rewards.schemas import (
    CreateRewardRequest,
    RedemptionListResponse,
    RedemptionResponse,
    RewardListResponse,
    RewardResponse,
)
from wastewise.rewards.service import (
    create_reward,
    effective_status,
    get_reward,
    list_rewards,
    list_user_redemptions,
    redeem,
    use_redemption,
)
from wastewise.time_utils import as_utc

router = APIRouter(prefix="/api/v1", tags=["Rewards"])


def _redemption_response(redemption: Redemption) -> RedemptionResponse:
    reward = redemption.reward
    return RedemptionResponse(
        id=redemption.id,
        user_id=redemption.user_id,
        reward_id=redemption.reward_id,
        redemption_code=redemption.redemption_code,
        status=effective_status(redemption),
        redeemed_at=as_utc(redemption.redeemed_at),
        expiry_date=as_utc(redemption.expiry_date),
        used_at=as_utc(redemption.used_at) if redemption.used_at else None,
        ledger_entry_id=redemption.ledger_entry_id,
        reward_title=reward.title if reward else None,
        points_spent=reward.points_required if reward else None,
    )


@router.get("/rewards", response_model=RewardListResponse)
async def list_rewards_endpoint(db: AsyncSession = Depends(get_session)):
    """Active rewards ordered by cost (public)."""
    rewards = await list_rewards(db)
    return RewardListResponse(rewards=[RewardResponse.model_validate(r) for r in rewards])


@router.get("/rewards/{reward_id}", response_model=RewardResponse)
async def get_reward_endpoint(reward_id: int, db: AsyncSession = Depends(get_session)):
    """Single reward detail."""
    reward = await get_reward(db, reward_id)
    if reward is None or not reward.is_active:
        raise HTTPException(status_code=404, detail="Reward not found")
    return RewardResponse.model_validate(reward)


@router.post("/rewards", response_model=RewardResponse, status_code=201)
async def create_reward_endpoint(
    body: CreateRewardRequest,
    _staff: User = Depends(get_staff_user),
    db: AsyncSession = Depends(get_session),
):
    """Add a reward to the catalog (staff only)."""
    reward = await create_reward(db, **body.model_dump())
    await db.commit()
    return RewardResponse.model_validate(reward)


@router.post("/rewards/{reward_id}/redeem", response_model=RedemptionResponse, status_code=201)
async def redeem_endpoint(
    reward_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Spend points on a reward. Errors map to 404/409/503 via the global handler."""
    redemption = await redeem(db, user.id, reward_id)
    return _redemption_response(redemption)


@router.get("/redemptions", response_model=RedemptionListResponse)
async def list_redemptions_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The current user's redemptions, newest first."""
    redemptions = await list_user_redemptions(db, user.id)
    return RedemptionListResponse(redemptions=[_redemption_response(r) for r in redemptions])


@router.post("/redemptions/{code}/use", response_model=RedemptionResponse)
async def use_redemption_endpoint(
    code: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Mark a redemption code as used."""
    redemption = await use_redemption(db, user.id, code)
    return _redemption_response(redemption)
