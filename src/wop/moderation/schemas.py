"""Request/response schemas for moderation endpoints.

Request bodies keep every field optional so the command parsers can report
exactly which required fields are missing.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator

from wop.moderation.reputation import as_utc


class _UtcTimestamps(BaseModel):
    @field_validator("banned_until", "created_at", mode="after", check_fields=False)
    @classmethod
    def _attach_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


# --- Requests ---


class UserActionRequest(BaseModel):
    action: str | None = None
    userId: str | None = None  # noqa: N815
    deltaPoints: Any = None  # noqa: N815
    bannedUntil: str | None = None  # noqa: N815


class RemoveContentRequest(BaseModel):
    reportId: int | str | None = None  # noqa: N815
    targetType: str | None = None  # noqa: N815
    targetId: str | None = None  # noqa: N815


class IgnoreReportRequest(BaseModel):
    reportId: int | None = None  # noqa: N815


class SubmitReportRequest(BaseModel):
    targetId: str | None = None  # noqa: N815
    targetType: str | None = None  # noqa: N815
    reason: str | None = None


class ChatReportRequest(BaseModel):
    messageId: int | str | None = None  # noqa: N815
    reason: str | None = None


# --- Responses ---


class ReputationSnapshot(_UtcTimestamps):
    """Post-action view of a user's standing."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    username: str | None = None
    points: int
    strikes: int
    banned_until: datetime | None = None


class UserActionResponse(BaseModel):
    success: bool = True
    profile: ReputationSnapshot


class FlaggedUser(_UtcTimestamps):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    username: str | None = None
    email: str | None = None
    points: int
    strikes: int
    banned_until: datetime | None = None
    profile_image_url: str | None = None
    recent_reports: int = 0


class FlaggedUsersResponse(BaseModel):
    data: list[FlaggedUser]


class ReportResponse(_UtcTimestamps):
    model_config = {"from_attributes": True}

    id: int
    target_id: str
    target_type: str
    reason: str
    status: str
    created_at: datetime


class ReportListResponse(BaseModel):
    data: list[ReportResponse]


class QueuedReportResponse(ReportResponse):
    reporter_id: uuid.UUID
    reporter_username: str | None = None


class ReportQueueResponse(BaseModel):
    data: list[QueuedReportResponse]


class SuccessResponse(BaseModel):
    success: bool = True


class SubmitReportResponse(BaseModel):
    success: bool = True
    report: ReportResponse
