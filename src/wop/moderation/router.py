"""Admin moderation router: user actions, flagged users, report queue."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wop.auth.dependencies import require_admin
from wop.auth.session import SessionUser
from wop.config import Settings, get_settings
from wop.database import get_session
from wop.errors import ValidationError
from wop.moderation.actions import apply_action, remove_content
from wop.moderation.commands import parse_remove_content, parse_user_action
from wop.moderation.locator import parse_uuid
from wop.moderation.reports import (
    count_recent_reports_by_owner,
    ignore_report,
    list_reports,
    list_reports_for_user,
)
from wop.moderation.reputation import list_flagged_profiles
from wop.moderation.schemas import (
    FlaggedUser,
    FlaggedUsersResponse,
    IgnoreReportRequest,
    QueuedReportResponse,
    RemoveContentRequest,
    ReportListResponse,
    ReportQueueResponse,
    ReportResponse,
    ReputationSnapshot,
    SuccessResponse,
    UserActionRequest,
    UserActionResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["Moderation"])


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.post("/admin/users/actions", response_model=UserActionResponse)
async def user_action_endpoint(
    body: UserActionRequest,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> UserActionResponse:
    """Ban, unban, reset strikes or adjust points for one user."""
    command = parse_user_action(body.model_dump())
    profile = await apply_action(db, command, settings)
    await db.commit()
    logger.info(
        "moderation_action_applied",
        action=command.action,
        user_id=str(command.user_id),
        admin_id=str(admin.user_id),
    )
    return UserActionResponse(profile=ReputationSnapshot.model_validate(profile))


@router.get("/admin/users/points", response_model=FlaggedUsersResponse)
async def flagged_users_endpoint(
    show_all: bool = Query(False, alias="showAll"),
    min_strikes: int = Query(1, alias="minStrikes"),
    max_points: int = Query(0, alias="maxPoints"),
    _admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> FlaggedUsersResponse:
    """Users with strikes or low points, each with their recent report count."""
    profiles = await list_flagged_profiles(
        db,
        show_all=show_all,
        min_strikes=min_strikes,
        max_points=max_points,
        limit=settings.flagged_users_limit,
    )
    since = datetime.now(timezone.utc) - timedelta(days=settings.recent_reports_window_days)
    counts = await count_recent_reports_by_owner(db, [p.id for p in profiles], since)

    data = [
        FlaggedUser.model_validate(p).model_copy(update={"recent_reports": counts.get(p.id, 0)})
        for p in profiles
    ]
    return FlaggedUsersResponse(data=data)


@router.get("/admin/users/reports", response_model=ReportListResponse)
async def user_reports_endpoint(
    user_id: str | None = Query(None, alias="userId"),
    _admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> ReportListResponse:
    """Reports against a user's profile or any content they own, newest first."""
    if not user_id:
        raise ValidationError.missing(["userId"])
    reports = await list_reports_for_user(
        db, parse_uuid(user_id, "userId"), limit=settings.user_reports_page_size
    )
    return ReportListResponse(data=[ReportResponse.model_validate(r) for r in reports])


# ---------------------------------------------------------------------------
# Report queue
# ---------------------------------------------------------------------------


@router.get("/admin/reports", response_model=ReportQueueResponse)
async def report_queue_endpoint(
    status: str | None = Query("pending"),
    _admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> ReportQueueResponse:
    """Moderation queue, oldest first. ``status=all`` lists every report."""
    rows = await list_reports(
        db,
        status=None if status == "all" else status,
        limit=settings.report_queue_limit,
    )
    data = [
        QueuedReportResponse(
            **ReportResponse.model_validate(report).model_dump(),
            reporter_id=report.reporter_id,
            reporter_username=username,
        )
        for report, username in rows
    ]
    return ReportQueueResponse(data=data)


@router.post("/reports/remove", response_model=SuccessResponse)
async def remove_content_endpoint(
    body: RemoveContentRequest,
    admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> SuccessResponse:
    """Delete reported content, penalise its owner and resolve the report."""
    command = parse_remove_content(body.model_dump())
    await remove_content(db, command, settings)
    await db.commit()
    logger.info("report_upheld", report_id=command.report_id, admin_id=str(admin.user_id))
    return SuccessResponse()


@router.post("/reports/ignore", response_model=SuccessResponse)
async def ignore_report_endpoint(
    body: IgnoreReportRequest,
    _admin: SessionUser = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """Dismiss a report; the content stays visible."""
    if body.reportId is None:
        raise ValidationError.missing(["reportId"])
    await ignore_report(db, body.reportId)
    await db.commit()
    return SuccessResponse()
