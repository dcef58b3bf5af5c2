"""Request/response schemas for the eco store."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UtilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    category: str
    price_points: int
    vendor_name: str | None = None
    availability_status: str


class UtilityListResponse(BaseModel):
    utilities: list[UtilityResponse]


class PurchaseRequest(BaseModel):
    utility_id: int
    quantity: int = Field(1, ge=1, le=10)
    delivery_address: str = Field(..., min_length=1)


class DeliveryStatusRequest(BaseModel):
    status: Literal["confirmed", "shipped", "delivered", "cancelled"]
    tracking_number: str | None = Field(None, max_length=64)


class PurchaseResponse(BaseModel):
    id: int
    utility_id: int
    utility_name: str | None = None
    quantity: int
    points_spent: int
    delivery_address: str
    delivery_status: str
    tracking_number: str | None = None
    refunded: bool
    created_at: datetime


class PurchaseListResponse(BaseModel):
    purchases: list[PurchaseResponse]
