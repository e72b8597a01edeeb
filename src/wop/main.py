"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from wop.auth.router import router as auth_router
from wop.config import get_settings
from wop.database import close_db, init_db
from wop.health.router import router as health_router
from wop.leaderboards.router import router as leaderboards_router
from wop.middleware import setup_middleware
from wop.moderation.router import router as moderation_router
from wop.redis_client import close_redis, init_redis
from wop.reports.router import router as reports_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database and Redis pools for the lifetime of the process."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Who's on Pole? Moderation API",
        description="Reports, reputation and ban enforcement for the Who's on Pole? community",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(reports_router)
    app.include_router(moderation_router)
    app.include_router(leaderboards_router)

    return app


app = create_app()
