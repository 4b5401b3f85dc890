"""Session context for the signed-in user.

Built once when a command starts and passed explicitly to every component
that needs the user or team identity.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from devban_board.models import BoardUser
from devban_board.repositories.repository import DocumentStore, Increment, NotFoundError

USERS = "users"


@dataclass(frozen=True)
class SessionContext:
    """Identity of the signed-in user.

    Attributes:
        uid: User id issued by the auth provider
        display_name: Display name
        team_id: Team the user belongs to, or None
        exp: Experience points at load time
    """

    uid: str
    display_name: str = ""
    team_id: str | None = None
    exp: int = 0

    @property
    def has_team(self) -> bool:
        return self.team_id is not None

    @classmethod
    async def load(cls, store: DocumentStore, uid: str) -> SessionContext:
        """Read the user's profile document.

        A user without a profile yet gets a session without a team.
        """
        try:
            document = await store.get(USERS, uid)
        except NotFoundError:
            return cls(uid=uid)
        user = BoardUser.model_validate({"uid": uid, **document})
        return cls(
            uid=user.uid,
            display_name=user.display_name,
            team_id=user.team_id,
            exp=user.exp,
        )

    def with_team(self, team_id: str | None) -> SessionContext:
        return replace(self, team_id=team_id)

    async def add_exp(self, store: DocumentStore, delta: int) -> None:
        """Atomically add ``delta`` (may be negative) to the user's points."""
        await store.update_fields(USERS, self.uid, {"exp": Increment(delta)})
