"""Reputation store: points, strikes and ban expiry on the profiles table.

All counter changes are single UPDATE statements with SQL-side arithmetic
(``points = points + :delta``) so concurrent moderators never lose updates.
Ban/unban are plain overwrites of ``banned_until`` and are last-write-wins.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wop.db.models import Profile
from wop.errors import NotFoundError

logger = structlog.get_logger()

DAYS_PER_YEAR = 365


def ban_sentinel(now: datetime, years: int = 100) -> datetime:
    """Return the "effectively permanent" ban expiry.

    Bans share one nullable timestamp for both the flag and the expiry, so a
    permanent ban is stored as ``now + years`` (365-day years).
    """
    return now + timedelta(days=DAYS_PER_YEAR * years)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps (SQLite drops the offset on read)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def is_banned(banned_until: datetime | None, now: datetime) -> bool:
    """A ban is active only while its expiry is in the future."""
    until = as_utc(banned_until)
    return until is not None and until > now


async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> Profile:
    """Load a profile with fresh column values, raising NotFoundError if missing."""
    result = await db.execute(
        select(Profile)
        .where(Profile.id == user_id)
        .execution_options(populate_existing=True)
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("User not found")
    return profile


async def find_profile(db: AsyncSession, user_id: uuid.UUID) -> Profile | None:
    """Like get_profile but returns None for unknown users."""
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def _update_profile(db: AsyncSession, user_id: uuid.UUID, **values: Any) -> None:  # noqa: ANN401
    result = await db.execute(
        update(Profile)
        .where(Profile.id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("User not found")


async def set_banned_until(db: AsyncSession, user_id: uuid.UUID, until: datetime) -> None:
    """Ban a user until the given instant."""
    await _update_profile(db, user_id, banned_until=until)
    logger.info("user_banned", user_id=str(user_id), banned_until=until.isoformat())


async def clear_ban(db: AsyncSession, user_id: uuid.UUID) -> None:
    """Lift any ban. Idempotent."""
    await _update_profile(db, user_id, banned_until=None)
    logger.info("user_unbanned", user_id=str(user_id))


async def reset_strikes(db: AsyncSession, user_id: uuid.UUID) -> None:
    await _update_profile(db, user_id, strikes=0)
    logger.info("strikes_reset", user_id=str(user_id))


async def award_points(db: AsyncSession, user_id: uuid.UUID, delta: int) -> None:
    """Atomically add ``delta`` (may be negative) to a user's points.

    Also the entry point for approved-contribution credits. There is no floor,
    so balances can go negative.
    """
    await _update_profile(db, user_id, points=Profile.points + delta)
    logger.info("points_adjusted", user_id=str(user_id), delta=delta)


async def apply_removal_penalty(
    db: AsyncSession,
    user_id: uuid.UUID,
    points: int,
    strikes: int,
) -> None:
    """Deduct points and add strikes in one statement after upheld content removal."""
    await _update_profile(
        db,
        user_id,
        points=Profile.points - points,
        strikes=Profile.strikes + strikes,
    )
    logger.info("removal_penalty_applied", user_id=str(user_id), points=-points, strikes=strikes)


async def list_flagged_profiles(
    db: AsyncSession,
    *,
    show_all: bool = False,
    min_strikes: int = 1,
    max_points: int = 0,
    limit: int = 200,
) -> list[Profile]:
    """Profiles for the admin users table, most strikes first.

    Unless ``show_all`` is set, only users with at least ``min_strikes``
    strikes or at most ``max_points`` points are returned.
    """
    query = select(Profile).order_by(Profile.strikes.desc(), Profile.points.asc()).limit(limit)
    if not show_all:
        query = query.where(or_(Profile.strikes >= min_strikes, Profile.points <= max_points))
    result = await db.execute(query)
    return list(result.scalars())
