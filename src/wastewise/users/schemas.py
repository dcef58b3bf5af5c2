"""User profile schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    id: int
    email: str
    full_name: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    user_type: str
    created_at: datetime
    balance: int
    lifetime_earned: int
    lifetime_spent: int
    level: int
    level_title: str
    next_title: str
    points_to_next: int


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = Field(None, min_length=1, max_length=128)
    phone: str | None = Field(None, max_length=32)
    address: str | None = None
    city: str | None = Field(None, max_length=64)
