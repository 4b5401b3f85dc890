"""Unit tests for TeamService - teams, licenses and invite codes."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from devban_board.services.session import SessionContext
from devban_board.services.team_service import (
    InviteCodeError,
    LicenseError,
    NoTeamError,
    TeamService,
)


@pytest.fixture()
def admin():
    return SessionContext(uid="admin-1", display_name="Admin")


@pytest.fixture()
def joiner():
    return SessionContext(uid="joiner-1", display_name="Joiner")


async def _create_team(store, admin):
    await store.create("licenses", "lic-1", {"id": "lic-1"})
    return await TeamService(store).create_team(admin, "Core", "lic-1")


class TestCreateTeam:
    @pytest.mark.asyncio
    async def test_creates_team_binds_license_and_joins(self, store, admin):
        session = await _create_team(store, admin)

        team = await TeamService(store).get_team(session.team_id)
        assert team.team_name == "Core"
        assert team.is_admin("admin-1")
        assert store.documents("licenses")["lic-1"]["team_id"] == session.team_id
        assert store.documents("users")["admin-1"]["team_id"] == session.team_id

    @pytest.mark.asyncio
    async def test_missing_license(self, store, admin):
        with pytest.raises(LicenseError):
            await TeamService(store).create_team(admin, "Core", "nope")

    @pytest.mark.asyncio
    async def test_used_license(self, store, admin):
        await store.create("licenses", "lic-1", {"id": "lic-1", "team_id": "other"})
        with pytest.raises(LicenseError):
            await TeamService(store).create_team(admin, "Core", "lic-1")
        assert store.documents("teams") == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name, license_id", [("", "lic-1"), ("Core", "  ")])
    async def test_blank_fields(self, store, admin, name, license_id):
        with pytest.raises(ValueError):
            await TeamService(store).create_team(admin, name, license_id)

    @pytest.mark.asyncio
    async def test_existing_user_document_is_updated(self, store, admin):
        await store.create("users", "admin-1", {"uid": "admin-1", "exp": 50})
        session = await _create_team(store, admin)
        user = store.documents("users")["admin-1"]
        assert user["team_id"] == session.team_id
        assert user["exp"] == 50


class TestInviteCodes:
    @pytest.mark.asyncio
    async def test_generate_and_redeem(self, store, admin, joiner):
        session = await _create_team(store, admin)
        service = TeamService(store)

        code = await service.generate_invite_code(session)
        joined = await service.redeem_invite_code(joiner, code)

        assert joined.team_id == session.team_id
        team = await service.get_team(session.team_id)
        assert team.role_of("joiner-1") == "member"
        assert code in team.invite_codes
        assert store.documents("team_invite_codes")[code]["redeemed_by_uid"] == "joiner-1"
        assert store.documents("users")["joiner-1"]["team_id"] == session.team_id

    @pytest.mark.asyncio
    async def test_code_valid_for_seven_days(self, store, admin):
        session = await _create_team(store, admin)
        code = await TeamService(store).generate_invite_code(session)
        doc = store.documents("team_invite_codes")[code]
        assert doc["expiry_date"] - doc["created_date"] == timedelta(days=7)

    @pytest.mark.asyncio
    async def test_generate_without_team(self, store, joiner):
        with pytest.raises(NoTeamError):
            await TeamService(store).generate_invite_code(joiner)

    @pytest.mark.asyncio
    async def test_unknown_code(self, store, joiner):
        with pytest.raises(InviteCodeError, match="does not exist"):
            await TeamService(store).redeem_invite_code(joiner, "nope")

    @pytest.mark.asyncio
    async def test_code_used_twice(self, store, admin, joiner):
        session = await _create_team(store, admin)
        service = TeamService(store)
        code = await service.generate_invite_code(session)
        await service.redeem_invite_code(joiner, code)

        with pytest.raises(InviteCodeError, match="used"):
            await service.redeem_invite_code(SessionContext(uid="late"), code)

    @pytest.mark.asyncio
    async def test_expired_code(self, store, admin, joiner):
        session = await _create_team(store, admin)
        past = datetime.now(UTC) - timedelta(days=8)
        await store.create(
            "team_invite_codes",
            "old",
            {
                "id": "old",
                "team_id": session.team_id,
                "created_date": past,
                "expiry_date": past + timedelta(days=7),
            },
        )
        with pytest.raises(InviteCodeError, match="expired"):
            await TeamService(store).redeem_invite_code(joiner, "old")

    @pytest.mark.asyncio
    async def test_code_for_deleted_team(self, store, joiner):
        now = datetime.now(UTC)
        await store.create(
            "team_invite_codes",
            "orphan",
            {
                "id": "orphan",
                "team_id": "gone",
                "created_date": now,
                "expiry_date": now + timedelta(days=7),
            },
        )
        with pytest.raises(InviteCodeError, match="team"):
            await TeamService(store).redeem_invite_code(joiner, "orphan")


class TestMembership:
    @pytest.mark.asyncio
    async def test_quit_team(self, store, admin, joiner):
        session = await _create_team(store, admin)
        service = TeamService(store)
        code = await service.generate_invite_code(session)
        joined = await service.redeem_invite_code(joiner, code)

        left = await service.quit_team(joined)

        assert left.team_id is None
        assert "team_id" not in store.documents("users")["joiner-1"]
        team = await service.get_team(session.team_id)
        assert team.role_of("joiner-1") is None
        assert team.is_admin("admin-1")

    @pytest.mark.asyncio
    async def test_quit_without_team(self, store, joiner):
        with pytest.raises(NoTeamError):
            await TeamService(store).quit_team(joiner)
