"""User-facing report submission endpoints."""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

from wop.auth.jwt import create_access_token

pytestmark = pytest.mark.asyncio


class TestSubmitReport:
    async def test_created(self, client: AsyncClient, make_profile, make_content, auth_headers):
        reporter = await make_profile()
        post = await make_content("post", await make_profile())
        response = await client.post(
            "/api/reports",
            json={"targetId": str(post.id), "targetType": "post", "reason": "Misinformation"},
            headers=auth_headers(reporter),
        )
        assert response.status_code == 201
        report = response.json()["report"]
        assert report["status"] == "pending"
        assert report["target_id"] == str(post.id)

    async def test_duplicate(self, client: AsyncClient, make_profile, auth_headers):
        reporter = await make_profile()
        target = await make_profile()
        body = {"targetId": str(target.id), "targetType": "profile", "reason": "Impersonation"}
        assert (await client.post("/api/reports", json=body, headers=auth_headers(reporter))).status_code == 201
        response = await client.post("/api/reports", json=body, headers=auth_headers(reporter))
        assert response.status_code == 409
        assert response.json()["detail"] == "You have already reported this content"

    async def test_missing_reason(self, client: AsyncClient, make_profile, auth_headers):
        reporter = await make_profile()
        response = await client.post(
            "/api/reports",
            json={"targetId": str(uuid.uuid4()), "targetType": "grid"},
            headers=auth_headers(reporter),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "reason is required"

    async def test_unsupported_type(self, client: AsyncClient, make_profile, auth_headers):
        reporter = await make_profile()
        response = await client.post(
            "/api/reports",
            json={"targetId": str(uuid.uuid4()), "targetType": "team", "reason": "Spam"},
            headers=auth_headers(reporter),
        )
        assert response.status_code == 400

    async def test_anonymous_redirected(self, client: AsyncClient):
        response = await client.post("/api/reports", json={})
        assert response.status_code == 307
        assert response.headers["location"].startswith("/login?redirectedFrom=")


class TestChatReport:
    async def test_reports_existing_message(
        self, client: AsyncClient, make_profile, make_chat_message, auth_headers
    ):
        reporter = await make_profile()
        message = await make_chat_message(await make_profile())
        response = await client.post(
            "/api/chat/report",
            json={"messageId": message.id, "reason": "Abusive"},
            headers=auth_headers(reporter),
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

    async def test_duplicate(self, client: AsyncClient, make_profile, make_chat_message, auth_headers):
        reporter = await make_profile()
        message = await make_chat_message(await make_profile())
        body = {"messageId": str(message.id), "reason": "Abusive"}
        await client.post("/api/chat/report", json=body, headers=auth_headers(reporter))
        response = await client.post("/api/chat/report", json=body, headers=auth_headers(reporter))
        assert response.status_code == 409

    async def test_missing_message(self, client: AsyncClient, make_profile, auth_headers):
        reporter = await make_profile()
        response = await client.post(
            "/api/chat/report",
            json={"messageId": 123456, "reason": "Abusive"},
            headers=auth_headers(reporter),
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Message not found"

    async def test_missing_fields(self, client: AsyncClient, make_profile, auth_headers):
        reporter = await make_profile()
        response = await client.post("/api/chat/report", json={}, headers=auth_headers(reporter))
        assert response.status_code == 400
        assert response.json()["detail"] == "messageId, reason are required"


async def test_reporter_needs_a_profile(client: AsyncClient) -> None:
    token = create_access_token(uuid.uuid4(), "new@example.com")
    response = await client.post(
        "/api/reports",
        json={"targetId": str(uuid.uuid4()), "targetType": "post", "reason": "Spam"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401
