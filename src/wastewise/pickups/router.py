"""Pickup API endpoints.

Users schedule, list and cancel their own pickups; staff start and complete
them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_current_user, get_staff_user
from wastewise.database import get_session
from wastewise.db.models import User
from wastewise.pickups.schemas import (
    CompletePickupRequest,
    PickupListResponse,
    PickupResponse,
    SchedulePickupRequest,
    StartPickupRequest,
    WasteRateResponse,
    WasteRatesResponse,
)
from wastewise.pickups.service import (
    cancel_pickup,
    complete_pickup,
    list_pickups,
    schedule_pickup,
    start_pickup,
)
from wastewise.pickups.state_machine import POINTS_PER_KG

router = APIRouter(prefix="/api/v1", tags=["Pickups"])


@router.get("/pickups/rates", response_model=WasteRatesResponse)
async def waste_rates():
    """Points per kg by waste type (public)."""
    return WasteRatesResponse(
        rates=[WasteRateResponse(waste_type=k, points_per_kg=v) for k, v in POINTS_PER_KG.items()]
    )


@router.get("/pickups", response_model=PickupListResponse)
async def list_pickups_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The current user's pickups."""
    pickups = await list_pickups(db, user.id)
    return PickupListResponse(pickups=[PickupResponse.model_validate(p) for p in pickups])


@router.post("/pickups", response_model=PickupResponse, status_code=201)
async def schedule_pickup_endpoint(
    body: SchedulePickupRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Schedule a pickup. Emergency pickups are charged the emergency fee."""
    pickup = await schedule_pickup(db, user.id, **body.model_dump())
    return PickupResponse.model_validate(pickup)


@router.post("/pickups/{pickup_id}/cancel", response_model=PickupResponse)
async def cancel_pickup_endpoint(
    pickup_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Cancel one of the user's pickups. Staff may cancel any pickup."""
    pickup = await cancel_pickup(db, pickup_id, None if user.is_staff else user.id)
    return PickupResponse.model_validate(pickup)


@router.post("/pickups/{pickup_id}/start", response_model=PickupResponse)
async def start_pickup_endpoint(
    pickup_id: int,
    body: StartPickupRequest,
    staff: User = Depends(get_staff_user),
    db: AsyncSession = Depends(get_session),
):
    """Confirm driver assignment (staff only)."""
    pickup = await start_pickup(db, pickup_id, body.driver_id or staff.id)
    return PickupResponse.model_validate(pickup)


@router.post("/pickups/{pickup_id}/complete", response_model=PickupResponse)
async def complete_pickup_endpoint(
    pickup_id: int,
    body: CompletePickupRequest,
    _staff: User = Depends(get_staff_user),
    db: AsyncSession = Depends(get_session),
):
    """Record the measured weight and award points (staff only)."""
    pickup = await complete_pickup(db, pickup_id, body.actual_weight_kg, body.driver_notes)
    return PickupResponse.model_validate(pickup)
