"""Middleware registration."""

from fastapi import FastAPI

from wop.config import Settings
from wop.middleware.ban_gate import BanGateMiddleware
from wop.middleware.cors import setup_cors
from wop.middleware.error_handler import setup_error_handlers
from wop.middleware.logging import setup_logging
from wop.middleware.rate_limit import RateLimitMiddleware
from wop.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order (last added = outermost), so
    a request passes CORS, request id, rate limit and finally the ban gate.
    Throttled requests never reach the gate's database read.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(BanGateMiddleware, settings=settings)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
