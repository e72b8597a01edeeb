"""Moderation error taxonomy.

Every error carries the HTTP status it maps to; the global handler in
``wop.middleware.error_handler`` turns them into ``{"detail": ...}`` responses.
"""

from __future__ import annotations

from collections.abc import Iterable


class ModerationError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_detail: str = "Moderation request failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(ModerationError):
    """Missing or malformed required fields."""

    status_code = 400
    default_detail = "Invalid request"

    @classmethod
    def missing(cls, fields: Iterable[str]) -> ValidationError:
        names = ", ".join(fields)
        return cls(f"{names} {'is' if ',' not in names else 'are'} required")


class UnsupportedActionError(ModerationError):
    status_code = 400
    default_detail = "Unsupported action"


class NotFoundError(ModerationError):
    status_code = 404
    default_detail = "Not found"


class DuplicateError(ModerationError):
    """Same reporter, same target, same type."""

    status_code = 409
    default_detail = "You have already reported this content"


class ReportAlreadyResolvedError(ModerationError):
    status_code = 409
    default_detail = "Report has already been resolved"


class BackendFailure(ModerationError):
    """The data store or an external collaborator call failed."""

    status_code = 500
    default_detail = "Backend request failed"


class UpstreamFailure(BackendFailure):
    """An external function call failed or returned an error status."""

    status_code = 502
    default_detail = "Upstream function call failed"
