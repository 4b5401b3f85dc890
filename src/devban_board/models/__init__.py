"""Devban board domain models.

Pydantic models for the documents the board reads and writes, plus the
application configuration schema.
"""

from .config_models import AppConfig
from .task import Difficulty, Task, TaskStatus
from .team import InviteCode, Team, TeamRole
from .user import BoardUser

__all__ = [
    # Task models
    "Task",
    "TaskStatus",
    "Difficulty",
    # Team models
    "Team",
    "TeamRole",
    "InviteCode",
    # User model
    "BoardUser",
    # Config models
    "AppConfig",
]
