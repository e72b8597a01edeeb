"""
Session token handling.

Access tokens are issued by the identity provider as HS256 JWTs signed with the
project secret. Claims used here: ``sub`` (user UUID), ``email`` and ``aud``.
``create_access_token`` exists for local tooling and tests.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from wop.config import Settings, get_settings


def create_access_token(
    user_id: uuid.UUID | str,
    email: str | None = None,
    *,
    settings: Settings | None = None,
    expires_in: timedelta | None = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: The user's profile id.
        email: Email address of the account, used by the admin gate.
        settings: Settings to sign with (defaults to the cached settings).
        expires_in: Token lifetime, defaults to ``jwt_access_token_expire_minutes``.

    Returns:
        Encoded JWT string.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "aud": settings.jwt_audience,
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": now + lifetime,
        "role": "authenticated",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings | None = None) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired or has no usable subject.
    """
    settings = settings or get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    try:
        uuid.UUID(str(payload.get("sub")))
    except ValueError:
        msg = "Token subject is not a user id"
        raise jwt.InvalidTokenError(msg) from None

    return payload
