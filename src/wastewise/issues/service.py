"""Issue reports filed by users and worked by staff.

Status progression: open -> in_progress -> resolved -> closed
An open or in-progress report may also be closed directly (duplicate, spam).
"""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.db.models import IssueReport, RecyclingCenter, WastePickup
from wastewise.points.errors import InvalidTransition, NotFound, ValidationError
from wastewise.time_utils import utcnow

logger = structlog.get_logger()

ISSUE_TYPES = frozenset({
    "pickup_delay",
    "missed_pickup",
    "quality_issue",
    "driver_behavior",
    "payment_issue",
    "other",
})
PRIORITIES = frozenset({"low", "medium", "high", "urgent"})

ISSUE_TRANSITIONS: dict[str, list[str]] = {
    "open": ["in_progress", "closed"],
    "in_progress": ["resolved", "closed"],
    "resolved": ["closed"],
    "closed": [],
}


def validate_issue_transition(current_status: str, target_status: str) -> None:
    valid = ISSUE_TRANSITIONS.get(current_status, [])
    if target_status not in valid:
        raise InvalidTransition(
            f"Invalid issue transition: {current_status} -> {target_status}. "
            f"Valid transitions: {valid}"
        )


async def create_issue(
    db: AsyncSession,
    user_id: int,
    *,
    issue_type: str,
    title: str,
    description: str,
    priority: str = "medium",
    pickup_id: int | None = None,
    center_id: int | None = None,
) -> IssueReport:
    """File a report. A linked pickup must belong to the reporting user."""
    if issue_type not in ISSUE_TYPES:
        raise ValidationError(f"Unknown issue type: {issue_type}")
    if priority not in PRIORITIES:
        raise ValidationError(f"Unknown priority: {priority}")
    if not title.strip() or not description.strip():
        raise ValidationError("title and description are required")

    if pickup_id is not None:
        pickup = await db.get(WastePickup, pickup_id)
        if pickup is None or pickup.user_id != user_id:
            raise NotFound(f"Pickup {pickup_id} not found")
    if center_id is not None:
        center = await db.get(RecyclingCenter, center_id)
        if center is None:
            raise NotFound(f"Recycling center {center_id} not found")

    now = utcnow()
    report = IssueReport(
        user_id=user_id,
        issue_type=issue_type,
        title=title.strip(),
        description=description,
        priority=priority,
        status="open",
        pickup_id=pickup_id,
        center_id=center_id,
        created_at=now,
        updated_at=now,
    )
    db.add(report)
    await db.commit()
    logger.info("issue_reported", user_id=user_id, issue_id=report.id, issue_type=issue_type, priority=priority)
    return report


async def list_issues(db: AsyncSession, user_id: int) -> list[IssueReport]:
    """The user's reports, newest first."""
    result = await db.execute(
        select(IssueReport)
        .where(IssueReport.user_id == user_id)
        .order_by(IssueReport.created_at.desc(), IssueReport.id.desc())
    )
    return list(result.scalars().all())


async def update_issue_status(
    db: AsyncSession,
    issue_id: int,
    status: str,
    admin_notes: str | None = None,
) -> IssueReport:
    """Move a report along its lifecycle. ``resolved_at`` is stamped once."""
    result = await db.execute(
        select(IssueReport)
        .where(IssueReport.id == issue_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    report = result.scalar_one_or_none()
    if report is None:
        raise NotFound(f"Issue {issue_id} not found")

    validate_issue_transition(report.status, status)
    now = utcnow()
    report.status = status
    if status == "resolved":
        report.resolved_at = now
    if admin_notes:
        report.admin_notes = admin_notes
    report.updated_at = now
    await db.commit()

    logger.info("issue_status_changed", issue_id=issue_id, status=status)
    return report
