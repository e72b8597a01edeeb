"""ORM models for profiles, reports and the content tables moderation touches.

The content tables (posts, comments, grids, live chat messages) belong to the
content subsystem. Only the columns needed to locate an owner and delete a
row are mapped here.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from wop.db.base import Base, BigIntPK

TARGET_TYPES = ("post", "comment", "grid", "profile", "chat_message")
REPORT_STATUSES = ("pending", "resolved_removed", "resolved_ignored")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Profiles (reputation lives here)
# ---------------------------------------------------------------------------


class Profile(Base):
    """One row per user: identity fields plus the points/strikes/ban triple."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user", server_default="user")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    strikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    # null = not banned; a past timestamp is an expired ban
    banned_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Content (owned by the content subsystem)
# ---------------------------------------------------------------------------


class Post(Base):
    """Fan post."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )


class Comment(Base):
    """Comment on a post, driver, team or track page."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )


class Grid(Base):
    """User-built starting grid."""

    __tablename__ = "grids"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )


class LiveChatMessage(Base):
    """Race-weekend live chat message."""

    __tablename__ = "live_chat_messages"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    track_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class Report(Base):
    """A flag raised by a user against a content item or profile. Never deleted."""

    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("reporter_id", "target_id", "target_type", name="uq_reports_reporter_target"),
        CheckConstraint(
            "target_type IN ('post', 'comment', 'grid', 'profile', 'chat_message')",
            name="ck_reports_target_type",
        ),
        CheckConstraint(
            "status IN ('pending', 'resolved_removed', 'resolved_ignored')",
            name="ck_reports_status",
        ),
        Index("idx_reports_target", "target_type", "target_id"),
        Index("idx_reports_status_created", "status", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    target_id: Mapped[str] = mapped_column(String(64), nullable=False)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", server_default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )


# Content kinds whose rows carry a user_id owner column
CONTENT_MODELS: dict[str, type[Post] | type[Comment] | type[Grid]] = {
    "post": Post,
    "comment": Comment,
    "grid": Grid,
}
