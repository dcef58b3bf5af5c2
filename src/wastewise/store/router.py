"""Eco store API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_current_user, get_staff_user
from wastewise.database import get_session
from wastewise.db.models import User, UtilityPurchase
from wastewise.store.schemas import (
    DeliveryStatusRequest,
    PurchaseListResponse,
    PurchaseRequest,
    PurchaseResponse,
    UtilityListResponse,
    UtilityResponse,
)
from wastewise.store.service import advance_delivery, list_purchases, list_utilities, purchase_utility

router = APIRouter(prefix="/api/v1/store", tags=["Store"])


def _purchase_response(purchase: UtilityPurchase) -> PurchaseResponse:
    return PurchaseResponse(
        id=purchase.id,
        utility_id=purchase.utility_id,
        utility_name=purchase.utility.name if purchase.utility else None,
        quantity=purchase.quantity,
        points_spent=purchase.points_spent,
        delivery_address=purchase.delivery_address,
        delivery_status=purchase.delivery_status,
        tracking_number=purchase.tracking_number,
        refunded=purchase.refund_entry_id is not None,
        created_at=purchase.created_at,
    )


@router.get("/utilities", response_model=UtilityListResponse)
async def list_utilities_endpoint(db: AsyncSession = Depends(get_session)):
    """Active catalog (public)."""
    utilities = await list_utilities(db)
    return UtilityListResponse(utilities=[UtilityResponse.model_validate(u) for u in utilities])


@router.get("/purchases", response_model=PurchaseListResponse)
async def list_purchases_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The current user's orders."""
    purchases = await list_purchases(db, user.id)
    return PurchaseListResponse(purchases=[_purchase_response(p) for p in purchases])


@router.post("/purchases", response_model=PurchaseResponse, status_code=201)
async def purchase_endpoint(
    body: PurchaseRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Buy a utility with points."""
    purchase = await purchase_utility(db, user.id, body.utility_id, body.quantity, body.delivery_address)
    return _purchase_response(purchase)


@router.post("/purchases/{purchase_id}/status", response_model=PurchaseResponse)
async def delivery_status_endpoint(
    purchase_id: int,
    body: DeliveryStatusRequest,
    _staff: User = Depends(get_staff_user),
    db: AsyncSession = Depends(get_session),
):
    """Advance delivery status (staff only). Cancelling refunds the points."""
    purchase = await advance_delivery(db, purchase_id, body.status, body.tracking_number)
    return _purchase_response(purchase)
