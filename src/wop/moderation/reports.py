"""Report ledger: append-mostly record of flags raised against content and profiles."""

from __future__ import annotations

import uuid
from collections import Counter
from collections.abc import Iterable
from datetime import datetime

import structlog
from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wop.db.models import REPORT_STATUSES, Profile, Report
from wop.errors import (
    BackendFailure,
    DuplicateError,
    NotFoundError,
    ReportAlreadyResolvedError,
    ValidationError,
)
from wop.moderation.locator import LOCATABLE_TYPES, normalize_target_id, owned_content_ids, resolve_owners

logger = structlog.get_logger()


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


async def submit_report(
    db: AsyncSession,
    reporter_id: uuid.UUID,
    target_id: object,
    target_type: str | None,
    reason: str | None,
) -> Report:
    """Insert a pending report.

    Raises:
        ValidationError: target id, target type or reason missing or malformed.
        DuplicateError: the reporter already reported this target.
    """
    missing = [
        name
        for name, value in (("targetId", target_id), ("targetType", target_type), ("reason", reason))
        if _is_blank(value)
    ]
    if missing:
        raise ValidationError.missing(missing)

    target_type = str(target_type)
    report = Report(
        reporter_id=reporter_id,
        target_id=normalize_target_id(target_type, target_id),
        target_type=target_type,
        reason=str(reason).strip(),
        status="pending",
    )
    db.add(report)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if "unique" in str(e.orig).lower():
            raise DuplicateError from e
        raise BackendFailure(str(e.orig)) from e

    logger.info(
        "report_submitted",
        report_id=report.id,
        reporter_id=str(reporter_id),
        target_type=report.target_type,
        target_id=report.target_id,
    )
    return report


async def get_report(db: AsyncSession, report_id: int) -> Report:
    result = await db.execute(
        select(Report).where(Report.id == report_id).execution_options(populate_existing=True)
    )
    report = result.scalar_one_or_none()
    if report is None:
        raise NotFoundError("Report not found")
    return report


async def _resolve(db: AsyncSession, report_id: int, status: str) -> Report:
    """Move a pending report to a resolved status, exactly once."""
    result = await db.execute(
        update(Report)
        .where(Report.id == report_id, Report.status == "pending")
        .values(status=status)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Distinguish a missing report from one another moderator already handled
        await get_report(db, report_id)
        raise ReportAlreadyResolvedError
    return await get_report(db, report_id)


async def mark_removed(db: AsyncSession, report_id: int) -> Report:
    return await _resolve(db, report_id, "resolved_removed")


async def ignore_report(db: AsyncSession, report_id: int) -> Report:
    """Resolve a report without touching the content or the owner's reputation."""
    report = await _resolve(db, report_id, "resolved_ignored")
    logger.info("report_ignored", report_id=report_id)
    return report


async def list_reports(
    db: AsyncSession,
    status: str | None = "pending",
    limit: int = 100,
) -> list[tuple[Report, str | None]]:
    """Reports for the moderation queue, oldest first, with the reporter's username."""
    if status is not None and status not in REPORT_STATUSES:
        msg = f"Unknown report status: {status}"
        raise ValidationError(msg)

    query = (
        select(Report, Profile.username)
        .outerjoin(Profile, Profile.id == Report.reporter_id)
        .order_by(Report.created_at.asc(), Report.id.asc())
        .limit(limit)
    )
    if status is not None:
        query = query.where(Report.status == status)
    result = await db.execute(query)
    return [(report, username) for report, username in result.all()]


async def list_reports_for_user(db: AsyncSession, user_id: uuid.UUID, limit: int = 50) -> list[Report]:
    """All reports whose target is owned by ``user_id``, newest first.

    Covers reports on the profile itself plus reports on any post, comment or
    grid the user owns. When the user owns no content the query reduces to
    the profile-report match.
    """
    owned = await owned_content_ids(db, user_id)

    conditions = [and_(Report.target_type == "profile", Report.target_id == str(user_id))]
    for target_type, ids in owned.items():
        if ids:
            conditions.append(and_(Report.target_type == target_type, Report.target_id.in_(ids)))

    result = await db.execute(
        select(Report)
        .where(or_(*conditions))
        .order_by(Report.created_at.desc(), Report.id.desc())
        .limit(limit)
    )
    return list(result.scalars())


async def count_recent_reports_by_owner(
    db: AsyncSession,
    owner_ids: Iterable[uuid.UUID],
    since: datetime,
) -> dict[uuid.UUID, int]:
    """Count reports created since ``since`` against each owner or their content."""
    wanted = set(owner_ids)
    if not wanted:
        return {}

    result = await db.execute(
        select(Report.target_type, Report.target_id).where(
            Report.created_at >= since,
            Report.target_type.in_(LOCATABLE_TYPES),
        )
    )
    refs = [(target_type, target_id) for target_type, target_id in result.all()]
    owners = await resolve_owners(db, set(refs))

    counts: Counter[uuid.UUID] = Counter()
    for ref in refs:
        owner = owners.get(ref)
        if owner in wanted:
            counts[owner] += 1
    return dict(counts)
