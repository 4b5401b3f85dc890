"""User data models."""

from datetime import datetime

from pydantic import BaseModel


class BoardUser(BaseModel):
    """User profile document."""

    uid: str
    display_name: str = ""
    team_id: str | None = None
    created_date: datetime | None = None
    exp: int = 0
