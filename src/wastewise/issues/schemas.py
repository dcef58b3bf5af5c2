"""Issue report schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IssueType = Literal["pickup_delay", "missed_pickup", "quality_issue", "driver_behavior", "payment_issue", "other"]
Priority = Literal["low", "medium", "high", "urgent"]


class CreateIssueRequest(BaseModel):
    issue_type: IssueType
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    priority: Priority = "medium"
    pickup_id: int | None = None
    center_id: int | None = None


class IssueStatusRequest(BaseModel):
    status: Literal["in_progress", "resolved", "closed"]
    admin_notes: str | None = Field(None, max_length=5000)


class IssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    issue_type: str
    title: str
    description: str
    priority: str
    status: str
    pickup_id: int | None = None
    center_id: int | None = None
    admin_notes: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class IssueListResponse(BaseModel):
    issues: list[IssueResponse]
