"""Global error handlers: consistent JSON error responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from wop.errors import BackendFailure, ModerationError

logger = structlog.get_logger()


def _field_names(errors: list[dict]) -> list[str]:
    names: list[str] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        if name not in names:
            names.append(name)
    return names


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed bodies and parameters are client errors (400) naming the fields."""
        errors = exc.errors()
        fields = _field_names(errors)
        return JSONResponse(
            status_code=400,
            content={
                "detail": f"Missing or invalid field(s): {', '.join(fields)}",
                "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors],
            },
        )

    @app.exception_handler(ModerationError)
    async def moderation_exception_handler(request: Request, exc: ModerationError) -> JSONResponse:
        """Map the moderation error taxonomy onto HTTP statuses."""
        if exc.status_code >= 500:
            logger.error("moderation_backend_failure", path=request.url.path, error=exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Data store failures surface as BackendFailure (500) with the store's message."""
        lines = str(getattr(exc, "orig", None) or exc).strip().splitlines()
        failure = BackendFailure(lines[0] if lines else None)
        logger.error(
            "database_error",
            path=request.url.path,
            method=request.method,
            error=failure.detail,
            exc_info=exc,
        )
        return JSONResponse(status_code=failure.status_code, content={"detail": failure.detail})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions: always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
