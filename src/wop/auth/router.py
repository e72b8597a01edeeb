"""Auth-adjacent endpoints: login attempt throttling and the suspension page."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from wop.config import Settings, get_settings
from wop.errors import ValidationError
from wop.middleware.rate_limit import client_ip
from wop.ratelimit import hit, window_key
from wop.redis_client import get_redis

logger = structlog.get_logger()

router = APIRouter(tags=["Auth"])


class RateLimitCheckRequest(BaseModel):
    endpoint: str | None = None


@router.post("/api/auth/rate-limit")
async def auth_rate_limit(
    body: RateLimitCheckRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
) -> dict[str, bool]:
    """Count one sign-in/sign-up attempt for this IP and endpoint.

    The frontend calls this before talking to the identity provider and
    gives up on 429.
    """
    if not body.endpoint:
        raise ValidationError.missing(["endpoint"])

    window = settings.auth_rate_limit_window_seconds
    ip = client_ip(request)
    key = window_key("auth_rate", f"{ip}:{body.endpoint}", window)
    attempts = await hit(get_redis(), key, window)

    if attempts > settings.auth_rate_limit_max:
        logger.warning("auth_rate_limited", ip=ip, endpoint=body.endpoint, attempts=attempts)
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
            headers={"Retry-After": str(window)},
        )
    return {"success": True}


@router.get("/banned")
async def banned() -> dict[str, str]:
    """Landing target for the ban gate. Deliberately says nothing about the ban."""
    return {
        "status": "suspended",
        "detail": "Your account has been suspended. Contact support if you believe this is a mistake.",
    }
