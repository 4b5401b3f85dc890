"""Team and invite code data models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, Field

INVITE_CODE_LIFETIME = timedelta(days=7)


class TeamRole(StrEnum):
    """Role of a member within a team."""

    ADMIN = "admin"
    MEMBER = "member"


class Team(BaseModel):
    """Team model.

    Attributes:
        id: Unique identifier for the team
        team_name: Display name
        created_date: Creation timestamp
        members: Mapping of user id to role
        license_id: License the team was created under
        invite_codes: Ids of invite codes generated for the team
    """

    id: str
    team_name: str
    created_date: datetime | None = None
    members: dict[str, TeamRole] = Field(default_factory=dict)
    license_id: str = ""
    invite_codes: list[str] | None = None

    def role_of(self, uid: str) -> TeamRole | None:
        return self.members.get(uid)

    def is_admin(self, uid: str) -> bool:
        return self.members.get(uid) == TeamRole.ADMIN


class InviteCode(BaseModel):
    """Single-use code that adds the redeeming user to a team."""

    id: str
    team_id: str
    created_date: datetime
    expiry_date: datetime
    redeem_date: datetime | None = None
    redeemed_by_uid: str | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expiry_date < (now or datetime.now(UTC))

    @property
    def is_redeemed(self) -> bool:
        return self.redeemed_by_uid is not None
