"""Trigger the hosted points-summary function that rebuilds leaderboards."""

from __future__ import annotations

import httpx
import structlog

from wop.config import Settings
from wop.errors import UpstreamFailure, ValidationError

logger = structlog.get_logger()

PERIOD_TYPES = ("weekly", "monthly")
POINTS_SUMMARY_FUNCTION = "generate-points-summary"


async def trigger_points_summary(
    period_type: str | None,
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, object]:
    """Ask the functions runtime to generate a weekly or monthly summary.

    The call is made once; any transport error or non-2xx status raises
    ``UpstreamFailure`` and the admin retries by hand.
    """
    if period_type not in PERIOD_TYPES:
        msg = f"periodType must be one of: {', '.join(PERIOD_TYPES)}"
        raise ValidationError(msg)

    url = f"{settings.functions_base_url.rstrip('/')}/{POINTS_SUMMARY_FUNCTION}"
    try:
        async with httpx.AsyncClient(
            transport=transport, timeout=settings.functions_timeout_seconds
        ) as client:
            response = await client.post(
                url,
                headers={"Authorization": f"Bearer {settings.service_role_key}"},
                json={"period_type": period_type},
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(
            "points_summary_failed",
            period_type=period_type,
            status_code=e.response.status_code,
        )
        msg = f"Points summary function returned {e.response.status_code}"
        raise UpstreamFailure(msg) from e
    except httpx.HTTPError as e:
        logger.error("points_summary_failed", period_type=period_type, error=str(e))
        raise UpstreamFailure from e

    logger.info("points_summary_generated", period_type=period_type)
    if not response.headers.get("content-type", "").startswith("application/json"):
        return {}
    body = response.json()
    return body if isinstance(body, dict) else {"data": body}
