"""FastAPI authentication dependencies.

Identity comes from ``BanGateMiddleware``, which has already resolved the
session and loaded the profile for protected paths and turned away banned
users. These dependencies only read ``request.state`` and add role checks.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from wop.auth.session import SessionUser
from wop.config import Settings, get_settings
from wop.db.models import Profile


def get_current_session(request: Request) -> SessionUser:
    """Return the request's session or raise 401."""
    session: SessionUser | None = getattr(request.state, "session", None)
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


def get_current_profile(
    request: Request,
    session: SessionUser = Depends(get_current_session),
) -> Profile:
    """Return the session user's profile or raise 401 when the row is missing."""
    profile: Profile | None = getattr(request.state, "profile", None)
    if profile is None or profile.id != session.user_id:
        raise HTTPException(status_code=401, detail="Profile not found")
    return profile


def is_admin(session: SessionUser, profile: Profile | None, settings: Settings) -> bool:
    """Admins have the admin role or an address on the staff email domain."""
    if profile is not None and profile.role == "admin":
        return True
    email = (session.email or "").lower()
    return bool(email) and email.endswith("@" + settings.admin_email_domain.lower())


def require_admin(
    request: Request,
    session: SessionUser = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
) -> SessionUser:
    """Role gate for admin-only endpoints (runs after the ban gate)."""
    if not is_admin(session, getattr(request.state, "profile", None), settings):
        raise HTTPException(status_code=403, detail="Admin access required")
    return session
