"""Request/response schemas for rewards and redemptions."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RewardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    points_required: int
    reward_type: str
    value_amount: Decimal | None = None
    vendor_name: str | None = None
    terms_conditions: str | None = None
    expiry_days: int
    max_redemptions: int | None = None
    current_redemptions: int
    is_active: bool


class RewardListResponse(BaseModel):
    rewards: list[RewardResponse]


class CreateRewardRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=128)
    points_required: int = Field(..., gt=0)
    description: str | None = None
    reward_type: Literal["discount", "voucher", "product", "cashback"] = "voucher"
    value_amount: Decimal | None = None
    vendor_name: str | None = Field(None, max_length=128)
    terms_conditions: str | None = None
    expiry_days: int = Field(30, ge=1)
    max_redemptions: int | None = Field(None, ge=1)
    is_active: bool = True


class RedemptionResponse(BaseModel):
    """External representation of a redemption."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    reward_id: int
    redemption_code: str
    status: Literal["active", "used", "expired"]
    redeemed_at: datetime
    expiry_date: datetime
    used_at: datetime | None = None
    ledger_entry_id: int
    reward_title: str | None = None
    points_spent: int | None = None


class RedemptionListResponse(BaseModel):
    redemptions: list[RedemptionResponse]
