"""Issue report endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.dependencies import get_current_user, get_staff_user
from wastewise.database import get_session
from wastewise.db.models import User
from wastewise.issues.schemas import CreateIssueRequest, IssueListResponse, IssueResponse, IssueStatusRequest
from wastewise.issues.service import create_issue, list_issues, update_issue_status

router = APIRouter(prefix="/api/v1/issues", tags=["Issues"])


@router.get("", response_model=IssueListResponse)
async def list_issues_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The current user's reports."""
    issues = await list_issues(db, user.id)
    return IssueListResponse(issues=[IssueResponse.model_validate(i) for i in issues])


@router.post("", response_model=IssueResponse, status_code=201)
async def create_issue_endpoint(
    body: CreateIssueRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    report = await create_issue(db, user.id, **body.model_dump())
    return IssueResponse.model_validate(report)


@router.post("/{issue_id}/status", response_model=IssueResponse)
async def issue_status_endpoint(
    issue_id: int,
    body: IssueStatusRequest,
    _staff: User = Depends(get_staff_user),
    db: AsyncSession = Depends(get_session),
):
    """Advance a report (staff only)."""
    report = await update_issue_status(db, issue_id, body.status, body.admin_notes)
    return IssueResponse.model_validate(report)
