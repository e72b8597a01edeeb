"""Ban gate: request-time access decision.

``evaluate_access`` is a pure function of the session, the user's reputation
row, the requested path and the current time. It is evaluated fresh on every
request; nothing about a ban is cached in the session token, so a ban applied
mid-session takes effect on the very next request.

A ban outranks every other authorization rule: role checks (see
``wop.auth.dependencies.require_admin``) only run for requests the gate lets
through.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from urllib.parse import urlencode

from wop.auth.session import SessionUser
from wop.moderation.reputation import is_banned


class GateState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED_OK = "authenticated_ok"
    AUTHENTICATED_BANNED = "authenticated_banned"


class GateOutcome(str, Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    BANNED = "banned"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    outcome: GateOutcome
    location: str | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GateOutcome.ALLOW


def is_public_path(path: str, public_paths: list[str] | tuple[str, ...]) -> bool:
    """Prefix match against the public allow-list (``/login`` covers ``/login/x``)."""
    for prefix in public_paths:
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            return True
    return False


def evaluate_access(
    session: SessionUser | None,
    banned_until: datetime | None,
    path: str,
    now: datetime,
    *,
    public_paths: list[str] | tuple[str, ...],
    login_path: str = "/login",
    banned_path: str = "/banned",
) -> GateDecision:
    """Decide whether a request may proceed.

    Args:
        session: The request's session, or None when anonymous.
        banned_until: The session user's ``banned_until`` (None if never banned
            or the profile row is missing).
        path: Requested URL path.
        now: Current time (timezone-aware).

    Returns:
        A GateDecision. ``location`` is set for redirects; for anonymous users
        it carries the requested path as ``redirectedFrom``.
    """
    if session is None:
        if is_public_path(path, public_paths):
            return GateDecision(GateState.ANONYMOUS, GateOutcome.ALLOW)
        query = urlencode({"redirectedFrom": path})
        return GateDecision(GateState.ANONYMOUS, GateOutcome.REDIRECT_LOGIN, f"{login_path}?{query}")

    if not is_banned(banned_until, now):
        return GateDecision(GateState.AUTHENTICATED_OK, GateOutcome.ALLOW)

    # Banned users can still reach public pages such as the suspension notice
    if is_public_path(path, public_paths):
        return GateDecision(GateState.AUTHENTICATED_BANNED, GateOutcome.ALLOW)
    return GateDecision(GateState.AUTHENTICATED_BANNED, GateOutcome.BANNED, banned_path)
