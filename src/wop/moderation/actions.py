"""Moderation action processor.

Each call affects exactly one user or one content item. Functions flush but
never commit: the caller owns the transaction, so every effect of one action
lands together or not at all.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from wop.config import Settings
from wop.db.models import Profile, Report
from wop.errors import NotFoundError, ReportAlreadyResolvedError, UnsupportedActionError, ValidationError
from wop.moderation import reputation
from wop.moderation.commands import (
    AdjustPoints,
    BanUser,
    RemoveContent,
    ResetStrikes,
    UnbanUser,
    UserCommand,
)
from wop.moderation.locator import delete_content, resolve_owner
from wop.moderation.reports import get_report, mark_removed

logger = structlog.get_logger()


async def apply_action(
    db: AsyncSession,
    command: UserCommand,
    settings: Settings,
    now: datetime | None = None,
) -> Profile:
    """Apply a user-scoped action and return the refreshed profile."""
    now = now or datetime.now(timezone.utc)

    if isinstance(command, BanUser):
        until = command.banned_until or reputation.ban_sentinel(now, settings.ban_sentinel_years)
        await reputation.set_banned_until(db, command.user_id, until)
    elif isinstance(command, UnbanUser):
        await reputation.clear_ban(db, command.user_id)
    elif isinstance(command, ResetStrikes):
        await reputation.reset_strikes(db, command.user_id)
    elif isinstance(command, AdjustPoints):
        await reputation.award_points(db, command.user_id, command.delta)
    else:
        msg = f"Unsupported action: {getattr(command, 'action', type(command).__name__)}"
        raise UnsupportedActionError(msg)

    return await reputation.get_profile(db, command.user_id)


async def remove_content(
    db: AsyncSession,
    command: RemoveContent,
    settings: Settings,
) -> Report:
    """Uphold a report: delete the content, penalise its owner, resolve the report.

    Order is fixed: owner lookup, delete, penalty, report resolution. Any
    failure before the final step propagates and the caller's rollback keeps
    the report pending. Profile targets are never deleted; the profile owner
    still takes the penalty.
    """
    report = await get_report(db, command.report_id)
    if report.target_type != command.target_type or report.target_id != command.target_id:
        msg = "targetType and targetId do not match the report"
        raise ValidationError(msg)
    if report.status != "pending":
        raise ReportAlreadyResolvedError

    try:
        owner_id = await resolve_owner(db, command.target_type, command.target_id)
    except NotFoundError:
        # Content already gone (e.g. removed through another report); it was
        # penalised then, so only the queue entry is settled here.
        logger.info(
            "content_already_removed",
            report_id=command.report_id,
            target_type=command.target_type,
            target_id=command.target_id,
        )
        return await mark_removed(db, command.report_id)

    deleted = await delete_content(db, command.target_type, command.target_id)
    if command.target_type != "profile" and not deleted:
        # Removed concurrently after the owner lookup; the other removal penalised.
        logger.info(
            "content_already_removed",
            report_id=command.report_id,
            target_type=command.target_type,
            target_id=command.target_id,
        )
        return await mark_removed(db, command.report_id)

    await reputation.apply_removal_penalty(
        db,
        owner_id,
        points=settings.removal_points_penalty,
        strikes=settings.removal_strike_penalty,
    )
    resolved = await mark_removed(db, command.report_id)

    logger.info(
        "content_removed",
        report_id=command.report_id,
        target_type=command.target_type,
        target_id=command.target_id,
        owner_id=str(owner_id),
    )
    return resolved
