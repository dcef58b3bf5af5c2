"""Points API endpoints: balance and transaction history."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_current_user
from wastewise.config import get_settings
from wastewise.database import get_session
from wastewise.db.models import User
from wastewise.points.ledger import recent_entries
from wastewise.points.projector import balance_of
from wastewise.points.schemas import BalanceResponse, LedgerEntryResponse, TransactionHistoryResponse

router = APIRouter(prefix="/api/v1/points", tags=["Points"])


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    as_of: datetime | None = Query(None, description="Balance just before this instant"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BalanceResponse:
    """Current balance, or the balance at a point in time."""
    balance = await balance_of(db, user.id, as_of=as_of)
    return BalanceResponse(user_id=user.id, balance=balance, as_of=as_of)


@router.get("/transactions", response_model=TransactionHistoryResponse)
async def get_transactions(
    limit: int | None = Query(None, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TransactionHistoryResponse:
    """Most recent ledger entries, newest first."""
    entries = await recent_entries(db, user.id, limit or get_settings().transaction_history_limit)
    return TransactionHistoryResponse(
        entries=[LedgerEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )
