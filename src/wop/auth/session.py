"""Request session extraction."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

import jwt
import structlog
from starlette.requests import Request

from wop.auth.jwt import verify_token
from wop.config import Settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class SessionUser:
    """Authenticated identity as supplied by the identity provider."""

    user_id: uuid.UUID
    email: str | None = None


def _token_from_request(request: Request, settings: Settings) -> str | None:
    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie:
        return cookie
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def read_session(request: Request, settings: Settings) -> SessionUser | None:
    """Return the session carried by the request, or None when absent or invalid.

    An invalid or expired token is treated the same as no token at all.
    """
    token = _token_from_request(request, settings)
    if token is None:
        return None
    try:
        payload = verify_token(token, settings)
    except jwt.InvalidTokenError as e:
        logger.info("session_token_rejected", reason=str(e), path=request.url.path)
        return None
    return SessionUser(user_id=uuid.UUID(payload["sub"]), email=payload.get("email"))
