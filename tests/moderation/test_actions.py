"""Moderation action processor tests."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import OperationalError

from wop.database import get_session_factory
from wop.db.models import Post
from wop.errors import NotFoundError, ReportAlreadyResolvedError, UnsupportedActionError, ValidationError
from wop.moderation import reputation
from wop.moderation.actions import apply_action, remove_content
from wop.moderation.commands import AdjustPoints, BanUser, RemoveContent, ResetStrikes, UnbanUser
from wop.moderation.locator import resolve_owner
from wop.moderation.reports import get_report

pytestmark = pytest.mark.asyncio


class TestApplyAction:
    async def test_permanent_ban_uses_sentinel(self, db, make_profile, settings):
        profile = await make_profile()
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)
        result = await apply_action(db, BanUser(user_id=profile.id), settings, now=now)
        assert reputation.as_utc(result.banned_until) == reputation.ban_sentinel(now, 100)

    async def test_timed_ban_then_unban(self, db, make_profile, settings):
        profile = await make_profile()
        until = datetime.now(timezone.utc) + timedelta(days=7)
        banned = await apply_action(db, BanUser(user_id=profile.id, banned_until=until), settings)
        assert reputation.as_utc(banned.banned_until) == until
        unbanned = await apply_action(db, UnbanUser(user_id=profile.id), settings)
        assert unbanned.banned_until is None

    async def test_adjust_and_reset(self, db, make_profile, settings):
        profile = await make_profile(points=10, strikes=2)
        adjusted = await apply_action(db, AdjustPoints(user_id=profile.id, delta=-15), settings)
        assert adjusted.points == -5
        reset = await apply_action(db, ResetStrikes(user_id=profile.id), settings)
        assert reset.strikes == 0

    async def test_unknown_user(self, db, settings):
        with pytest.raises(NotFoundError):
            await apply_action(db, UnbanUser(user_id=uuid.uuid4()), settings)

    async def test_rejects_non_user_command(self, db, settings):
        command = RemoveContent(report_id=1, target_type="post", target_id=str(uuid.uuid4()))
        with pytest.raises(UnsupportedActionError):
            await apply_action(db, command, settings)  # type: ignore[arg-type]


class TestRemoveContent:
    async def test_deletes_penalises_and_resolves(
        self, db, make_profile, make_content, make_report, settings
    ):
        owner = await make_profile(points=20, strikes=0)
        post = await make_content("post", owner)
        report = await make_report(await make_profile(), "post", post.id)

        command = RemoveContent(report_id=report.id, target_type="post", target_id=str(post.id))
        resolved = await remove_content(db, command, settings)
        await db.commit()

        assert resolved.status == "resolved_removed"
        with pytest.raises(NotFoundError):
            await resolve_owner(db, "post", str(post.id))
        penalised = await reputation.get_profile(db, owner.id)
        assert (penalised.points, penalised.strikes) == (15, 1)

    async def test_profile_target_is_penalised_not_deleted(
        self, db, make_profile, make_report, settings
    ):
        owner = await make_profile(points=3)
        report = await make_report(await make_profile(), "profile", owner.id)
        command = RemoveContent(report_id=report.id, target_type="profile", target_id=str(owner.id))
        await remove_content(db, command, settings)
        await db.commit()
        penalised = await reputation.get_profile(db, owner.id)
        assert (penalised.points, penalised.strikes) == (-2, 1)

    async def test_failed_delete_keeps_report_pending(
        self, db, make_profile, make_content, make_report, settings, monkeypatch
    ):
        owner = await make_profile(points=20)
        comment = await make_content("comment", owner)
        report = await make_report(await make_profile(), "comment", comment.id)
        monkeypatch.setattr(
            "wop.moderation.actions.delete_content",
            AsyncMock(side_effect=OperationalError("DELETE", {}, Exception("disk I/O error"))),
        )

        report_id, owner_id = report.id, owner.id

        command = RemoveContent(report_id=report_id, target_type="comment", target_id=str(comment.id))
        with pytest.raises(OperationalError):
            await remove_content(db, command, settings)
        await db.rollback()

        assert (await get_report(db, report_id)).status == "pending"
        assert (await reputation.get_profile(db, owner_id)).points == 20

    async def test_content_deleted_after_lookup_is_not_penalised_twice(
        self, db, make_profile, make_content, make_report, settings, monkeypatch
    ):
        owner = await make_profile(points=20)
        post = await make_content("post", owner)
        report = await make_report(await make_profile(), "post", post.id)
        report_id, owner_id, post_id = report.id, owner.id, post.id

        async def resolve_then_delete_elsewhere(session, target_type, target_id):
            owner_found = await resolve_owner(session, target_type, target_id)
            async with get_session_factory()() as other:
                await other.execute(delete(Post).where(Post.id == post_id))
                await other.commit()
            return owner_found

        monkeypatch.setattr("wop.moderation.actions.resolve_owner", resolve_then_delete_elsewhere)

        command = RemoveContent(report_id=report_id, target_type="post", target_id=str(post_id))
        resolved = await remove_content(db, command, settings)
        await db.commit()

        assert resolved.status == "resolved_removed"
        untouched = await reputation.get_profile(db, owner_id)
        assert (untouched.points, untouched.strikes) == (20, 0)

    async def test_content_already_gone_resolves_without_penalty(
        self, db, make_profile, make_report, settings
    ):
        owner = await make_profile(points=20)
        missing_post = uuid.uuid4()
        report = await make_report(await make_profile(), "post", missing_post)
        command = RemoveContent(report_id=report.id, target_type="post", target_id=str(missing_post))
        resolved = await remove_content(db, command, settings)
        assert resolved.status == "resolved_removed"
        assert (await reputation.get_profile(db, owner.id)).points == 20

    async def test_target_must_match_report(self, db, make_profile, make_content, make_report, settings):
        owner = await make_profile()
        post = await make_content("post", owner)
        report = await make_report(await make_profile(), "post", post.id)
        command = RemoveContent(report_id=report.id, target_type="post", target_id=str(uuid.uuid4()))
        with pytest.raises(ValidationError, match="do not match"):
            await remove_content(db, command, settings)

    async def test_resolved_report_conflicts(self, db, make_profile, make_content, make_report, settings):
        owner = await make_profile(points=20)
        grid = await make_content("grid", owner)
        report = await make_report(await make_profile(), "grid", grid.id, status="resolved_ignored")
        command = RemoveContent(report_id=report.id, target_type="grid", target_id=str(grid.id))
        with pytest.raises(ReportAlreadyResolvedError):
            await remove_content(db, command, settings)
        assert (await reputation.get_profile(db, owner.id)).points == 20

    async def test_unknown_report(self, db, settings):
        command = RemoveContent(report_id=404, target_type="post", target_id=str(uuid.uuid4()))
        with pytest.raises(NotFoundError, match="Report not found"):
            await remove_content(db, command, settings)
