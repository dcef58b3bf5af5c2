"""Recycling center endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_staff_user
from wastewise.centers.schemas import CenterListResponse, CenterResponse, CreateCenterRequest
from wastewise.centers.service import create_center, get_center, list_centers
from wastewise.database import get_session
from wastewise.db.models import User

router = APIRouter(prefix="/api/v1/centers", tags=["Recycling Centers"])


@router.get("", response_model=CenterListResponse)
async def list_centers_endpoint(
    waste_type: str | None = Query(None, description="Only centers accepting this waste type"),
    db: AsyncSession = Depends(get_session),
):
    """Active recycling centers by name (public)."""
    centers = await list_centers(db, waste_type)
    return CenterListResponse(centers=[CenterResponse.model_validate(c) for c in centers])


@router.get("/{center_id}", response_model=CenterResponse)
async def get_center_endpoint(center_id: int, db: AsyncSession = Depends(get_session)):
    return CenterResponse.model_validate(await get_center(db, center_id))


@router.post("", response_model=CenterResponse, status_code=201)
async def create_center_endpoint(
    body: CreateCenterRequest,
    _staff: User = Depends(get_staff_user),
    db: AsyncSession = Depends(get_session),
):
    """Add a center (staff only)."""
    center = await create_center(db, **body.model_dump())
    await db.commit()
    return CenterResponse.model_validate(center)
