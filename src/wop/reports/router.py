"""User-facing report submission endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wop.auth.dependencies import get_current_profile
from wop.database import get_session
from wop.db.models import LiveChatMessage, Profile
from wop.errors import NotFoundError, ValidationError
from wop.moderation.reports import submit_report
from wop.moderation.schemas import (
    ChatReportRequest,
    ReportResponse,
    SubmitReportRequest,
    SubmitReportResponse,
    SuccessResponse,
)

router = APIRouter(prefix="/api", tags=["Reports"])


@router.post("/reports", response_model=SubmitReportResponse, status_code=201)
async def submit_report_endpoint(
    body: SubmitReportRequest,
    reporter: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> SubmitReportResponse:
    """Flag a post, comment, grid or profile for moderator review."""
    if body.targetType == "chat_message":
        raise ValidationError("Use /api/chat/report for chat messages")
    report = await submit_report(db, reporter.id, body.targetId, body.targetType, body.reason)
    await db.commit()
    return SubmitReportResponse(report=ReportResponse.model_validate(report))


@router.post("/chat/report", response_model=SuccessResponse)
async def report_chat_message_endpoint(
    body: ChatReportRequest,
    reporter: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """Flag a live chat message. The message must still exist."""
    missing = [
        name
        for name, value in (("messageId", body.messageId), ("reason", body.reason))
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ValidationError.missing(missing)

    try:
        message_id = int(body.messageId)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ValidationError("messageId must be an integer") from e

    result = await db.execute(select(LiveChatMessage.id).where(LiveChatMessage.id == message_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Message not found")

    await submit_report(db, reporter.id, message_id, "chat_message", body.reason)
    await db.commit()
    return SuccessResponse()
