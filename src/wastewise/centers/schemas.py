"""Recycling center schemas."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wastewise.pickups.schemas import WasteType


class CenterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str
    city: str
    state: str
    pincode: str
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    phone: str | None = None
    email: str | None = None
    operating_hours: dict[str, Any] | None = None
    waste_types_accepted: list[str]
    capacity_tons: Decimal
    current_load_tons: Decimal
    rating: Decimal


class CenterListResponse(BaseModel):
    centers: list[CenterResponse]


class CreateCenterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1, max_length=64)
    state: str = Field(..., min_length=1, max_length=64)
    pincode: str = Field(..., min_length=1, max_length=16)
    waste_types_accepted: list[WasteType] = Field(..., min_length=1)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)
    phone: str | None = Field(None, max_length=32)
    email: str | None = Field(None, max_length=320)
    operating_hours: dict[str, Any] | None = None
    capacity_tons: Decimal = Field(Decimal("0"), ge=0)
    rating: Decimal = Field(Decimal("0"), ge=0, le=5)
