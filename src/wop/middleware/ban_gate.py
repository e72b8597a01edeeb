"""Ban gate middleware: runs the access decision on every request."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from wop.auth.session import SessionUser, read_session
from wop.config import Settings
from wop.database import get_session_factory
from wop.db.models import Profile
from wop.moderation.gate import GateOutcome, evaluate_access, is_public_path
from wop.moderation.reputation import find_profile

logger = structlog.get_logger()


async def _load_profile(session: SessionUser) -> Profile | None:
    """Read the reputation row fresh from the database."""
    async with get_session_factory()() as db:
        return await find_profile(db, session.user_id)


class BanGateMiddleware(BaseHTTPMiddleware):
    """Deny banned users and send anonymous users to the login surface.

    The resolved session and profile are stored on ``request.state`` for the
    auth dependencies, which layer role checks on top of this gate.
    """

    def __init__(self, app: Any, settings: Settings) -> None:  # noqa: ANN401
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Evaluate the gate; redirect or pass the request through."""
        path = request.url.path
        session = read_session(request, self.settings)
        profile = None
        if session is not None and not is_public_path(path, self.settings.public_paths):
            profile = await _load_profile(session)

        request.state.session = session
        request.state.profile = profile

        decision = evaluate_access(
            session,
            profile.banned_until if profile else None,
            path,
            datetime.now(timezone.utc),
            public_paths=self.settings.public_paths,
            login_path=self.settings.login_path,
            banned_path=self.settings.banned_path,
        )

        if decision.outcome is GateOutcome.REDIRECT_LOGIN:
            return RedirectResponse(decision.location or self.settings.login_path, status_code=307)

        if decision.outcome is GateOutcome.BANNED:
            logger.warning(
                "ban_gate_denied",
                user_id=str(session.user_id) if session else None,
                path=path,
            )
            response = RedirectResponse(decision.location or self.settings.banned_path, status_code=307)
            # Sign the user out: drop the session cookie on the way to the notice
            response.delete_cookie(self.settings.session_cookie_name)
            return response

        return await call_next(request)
