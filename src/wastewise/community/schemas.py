"""Leaderboard schemas."""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: int
    full_name: str
    city: str | None = None
    points: int
    level: int
    level_title: str
    is_current_user: bool


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntryResponse]
