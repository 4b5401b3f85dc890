"""Team service - team creation, invite codes and membership."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from devban_board.models import InviteCode, Team, TeamRole
from devban_board.models.team import INVITE_CODE_LIFETIME
from devban_board.repositories.repository import (
    DELETE_FIELD,
    ArrayUnion,
    DocumentStore,
    NotFoundError,
)
from devban_board.services.session import USERS, SessionContext
from devban_board.utils.logger import get_logger

TEAMS = "teams"
INVITE_CODES = "team_invite_codes"
LICENSES = "licenses"


class NoTeamError(Exception):
    """The operation needs a team and the session has none."""


class InviteCodeError(Exception):
    """An invite code cannot be redeemed."""


class LicenseError(Exception):
    """A license key is missing or already bound to another team."""


class TeamService:
    """Service for team membership operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_team(self, team_id: str) -> Team:
        document = await self.store.get(TEAMS, team_id)
        return Team.model_validate({"id": team_id, **document})

    async def create_team(
        self, session: SessionContext, team_name: str, license_id: str
    ) -> SessionContext:
        """Create a team with the caller as admin and join it.

        The license must exist and not yet be bound to a team; it is bound
        to the new one.

        Returns:
            The session updated with the new team

        Raises:
            ValueError: If the team name or license id is blank
            LicenseError: If the license is missing or already used
        """
        if not team_name.strip() or not license_id.strip():
            raise ValueError("Invalid team name or license")

        try:
            license_doc = await self.store.get(LICENSES, license_id)
        except NotFoundError as e:
            raise LicenseError("Invalid / missing License Key.") from e
        if license_doc.get("team_id"):
            raise LicenseError("The license is already used for other teams!")

        team_id = str(uuid.uuid4())
        await self.store.create(
            TEAMS,
            team_id,
            {
                "id": team_id,
                "team_name": team_name,
                "created_date": datetime.now(UTC),
                "members": {session.uid: TeamRole.ADMIN.value},
                "license_id": license_id,
            },
        )
        await self.store.update_fields(LICENSES, license_id, {"team_id": team_id})
        await self._set_user_team(session, team_id)
        get_logger(__name__).info("team %s created by %s", team_id, session.uid)
        return session.with_team(team_id)

    async def generate_invite_code(self, session: SessionContext) -> str:
        """Create an invite code for the session's team, valid for 7 days.

        Raises:
            NoTeamError: If the session has no team
        """
        if session.team_id is None:
            raise NoTeamError("Failed to get team ID.")

        code_id = uuid.uuid4().hex
        now = datetime.now(UTC)
        await self.store.create(
            INVITE_CODES,
            code_id,
            {
                "id": code_id,
                "team_id": session.team_id,
                "created_date": now,
                "expiry_date": now + INVITE_CODE_LIFETIME,
            },
        )
        await self.store.update_fields(
            TEAMS, session.team_id, {"invite_codes": ArrayUnion([code_id])}
        )
        return code_id

    async def redeem_invite_code(
        self, session: SessionContext, code_id: str
    ) -> SessionContext:
        """Join the team an invite code belongs to.

        Returns:
            The session updated with the joined team

        Raises:
            InviteCodeError: If the code does not exist, has expired or was
                already used, or its team cannot be loaded
        """
        try:
            document = await self.store.get(INVITE_CODES, code_id)
        except NotFoundError as e:
            raise InviteCodeError("The invite code does not exist!") from e
        invite = InviteCode.model_validate({"id": code_id, **document})

        try:
            team = await self.get_team(invite.team_id)
        except NotFoundError as e:
            raise InviteCodeError("Failed to get team information!") from e

        if invite.is_expired():
            raise InviteCodeError("The invite code has expired!")
        if invite.is_redeemed:
            raise InviteCodeError("The invite code has been used!")

        await self.store.update_fields(
            INVITE_CODES,
            code_id,
            {"redeemed_by_uid": session.uid, "redeem_date": datetime.now(UTC)},
        )
        await self.store.update_fields(
            TEAMS, team.id, {f"members.{session.uid}": TeamRole.MEMBER.value}
        )
        await self._set_user_team(session, team.id)
        get_logger(__name__).info("user %s joined team %s", session.uid, team.id)
        return session.with_team(team.id)

    async def remove_member(self, team_id: str, uid: str) -> None:
        await self.store.update_fields(TEAMS, team_id, {f"members.{uid}": DELETE_FIELD})

    async def quit_team(self, session: SessionContext) -> SessionContext:
        """Leave the current team.

        Raises:
            NoTeamError: If the session has no team
        """
        if session.team_id is None:
            raise NoTeamError("Failed to get userID or teamID")
        await self.store.update_fields(USERS, session.uid, {"team_id": DELETE_FIELD})
        await self.remove_member(session.team_id, session.uid)
        return session.with_team(None)

    async def _set_user_team(self, session: SessionContext, team_id: str) -> None:
        try:
            await self.store.update_fields(USERS, session.uid, {"team_id": team_id})
        except NotFoundError:
            await self.store.create(
                USERS,
                session.uid,
                {
                    "uid": session.uid,
                    "display_name": session.display_name,
                    "team_id": team_id,
                    "created_date": datetime.now(UTC),
                    "exp": session.exp,
                },
            )
