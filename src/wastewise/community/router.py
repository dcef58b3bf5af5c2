"""Community endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_current_user
from wastewise.community.schemas import LeaderboardEntryResponse, LeaderboardResponse
from wastewise.community.service import leaderboard
from wastewise.database import get_session
from wastewise.db.models import User

router = APIRouter(prefix="/api/v1/community", tags=["Community"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Top 10 recyclers by points."""
    rows = await leaderboard(db)
    return LeaderboardResponse(
        entries=[
            LeaderboardEntryResponse(**asdict(row), is_current_user=row.user_id == user.id)
            for row in rows
        ]
    )
