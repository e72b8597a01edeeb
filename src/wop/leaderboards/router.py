"""Admin leaderboard endpoints."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from wop.auth.dependencies import require_admin
from wop.auth.session import SessionUser
from wop.config import Settings, get_settings
from wop.leaderboards.service import trigger_points_summary

router = APIRouter(prefix="/api/admin/leaderboards", tags=["Leaderboards"])


class GenerateLeaderboardRequest(BaseModel):
    periodType: str | None = None  # noqa: N815


class GenerateLeaderboardResponse(BaseModel):
    success: bool = True
    period_type: str
    result: dict[str, object] = {}


def get_functions_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outbound function calls; tests override this."""
    return None


@router.post("/generate", response_model=GenerateLeaderboardResponse)
async def generate_leaderboard_endpoint(
    body: GenerateLeaderboardRequest,
    _admin: SessionUser = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_functions_transport),
) -> GenerateLeaderboardResponse:
    result = await trigger_points_summary(body.periodType, settings, transport=transport)
    return GenerateLeaderboardResponse(period_type=str(body.periodType), result=result)
