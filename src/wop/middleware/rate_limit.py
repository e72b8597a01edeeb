"""Per-IP request throttling middleware backed by Redis counters."""

from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from wop.ratelimit import hit, window_key
from wop.redis_client import get_redis

logger = structlog.get_logger()

# Probes are never throttled
_EXEMPT_PATHS = frozenset({"/health", "/ready"})


def client_ip(request: Request) -> str:
    """Peer address. Behind a proxy, uvicorn's --proxy-headers rewrites it."""
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Return 429 once an IP exceeds ``requests_per_window`` in the current window."""

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 60) -> None:  # noqa: ANN401
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Count the request, reject when over the limit, annotate the response otherwise."""
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        try:
            redis = get_redis()
        except RuntimeError:
            # Redis not connected (local runs, tests): no throttling
            return await call_next(request)

        key = window_key("ratelimit", client_ip(request), self.window_seconds)
        current_count = await hit(redis, key, self.window_seconds)
        remaining = max(0, self.requests_per_window - current_count)

        if current_count > self.requests_per_window:
            logger.info("rate_limited", key=key, count=current_count)
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Limit": str(self.requests_per_window),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_window)
        return response
