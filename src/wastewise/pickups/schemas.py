"""Request/response schemas for pickup endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

WasteType = Literal["plastic", "paper", "glass", "metal", "electronic", "organic", "mixed"]


class SchedulePickupRequest(BaseModel):
    pickup_date: date
    pickup_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    waste_type: WasteType
    pickup_address: str = Field(..., min_length=1)
    estimated_weight_kg: Decimal | None = Field(None, gt=0)
    special_instructions: str | None = None
    emergency: bool = False


class StartPickupRequest(BaseModel):
    driver_id: int | None = None


class CompletePickupRequest(BaseModel):
    actual_weight_kg: Decimal | None = None
    driver_notes: str | None = None


class PickupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: str
    waste_type: str
    pickup_date: date
    pickup_time: str
    pickup_address: str
    special_instructions: str | None = None
    estimated_weight_kg: Decimal | None = None
    actual_weight_kg: Decimal | None = None
    points_awarded: int | None = None
    driver_id: int | None = None
    driver_notes: str | None = None
    is_emergency: bool
    emergency_fee_points: int
    created_at: datetime
    completed_at: datetime | None = None


class PickupListResponse(BaseModel):
    pickups: list[PickupResponse]


class WasteRateResponse(BaseModel):
    waste_type: str
    points_per_kg: int


class WasteRatesResponse(BaseModel):
    rates: list[WasteRateResponse]
