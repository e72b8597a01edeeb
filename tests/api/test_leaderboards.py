"""Leaderboard generation trigger tests (external function mocked with httpx.MockTransport)."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from wop.errors import UpstreamFailure, ValidationError
from wop.leaderboards.router import get_functions_transport
from wop.leaderboards.service import trigger_points_summary

pytestmark = pytest.mark.asyncio


def _transport(status_code: int, calls: list[httpx.Request]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, json={"inserted": 12})

    return httpx.MockTransport(handler)


class TestTriggerPointsSummary:
    async def test_posts_period_with_service_key(self, settings):
        calls: list[httpx.Request] = []
        configured = settings.model_copy(
            update={"functions_base_url": "https://fn.example/functions/v1/", "service_role_key": "srk"}
        )
        result = await trigger_points_summary("weekly", configured, transport=_transport(200, calls))

        assert result == {"inserted": 12}
        (request,) = calls
        assert str(request.url) == "https://fn.example/functions/v1/generate-points-summary"
        assert request.headers["authorization"] == "Bearer srk"
        assert json.loads(request.content) == {"period_type": "weekly"}

    async def test_rejects_unknown_period(self, settings):
        with pytest.raises(ValidationError, match="periodType"):
            await trigger_points_summary("daily", settings, transport=_transport(200, []))

    async def test_error_status_raises_upstream_failure(self, settings):
        with pytest.raises(UpstreamFailure, match="500"):
            await trigger_points_summary("monthly", settings, transport=_transport(500, []))

    async def test_transport_error_raises_upstream_failure(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamFailure):
            await trigger_points_summary("weekly", settings, transport=httpx.MockTransport(handler))


class TestGenerateEndpoint:
    async def test_success(self, app: FastAPI, admin_client: AsyncClient):
        calls: list[httpx.Request] = []
        app.dependency_overrides[get_functions_transport] = lambda: _transport(200, calls)

        response = await admin_client.post("/api/admin/leaderboards/generate", json={"periodType": "monthly"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "period_type": "monthly", "result": {"inserted": 12}}
        assert len(calls) == 1

    async def test_upstream_failure_is_502(self, app: FastAPI, admin_client: AsyncClient):
        app.dependency_overrides[get_functions_transport] = lambda: _transport(503, [])
        response = await admin_client.post("/api/admin/leaderboards/generate", json={"periodType": "weekly"})
        assert response.status_code == 502

    async def test_admin_only(self, client: AsyncClient, make_profile, auth_headers):
        user = await make_profile(email="fan@example.com")
        response = await client.post(
            "/api/admin/leaderboards/generate", json={"periodType": "weekly"}, headers=auth_headers(user)
        )
        assert response.status_code == 403
