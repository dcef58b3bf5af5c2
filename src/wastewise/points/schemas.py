"""Pydantic response models for points endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LedgerEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: str
    points: int
    reference_type: str | None = None
    reference_id: int | None = None
    description: str | None = None
    created_at: datetime


class TransactionHistoryResponse(BaseModel):
    entries: list[LedgerEntryResponse]
    total: int


class BalanceResponse(BaseModel):
    user_id: int
    balance: int
    as_of: datetime | None = None
