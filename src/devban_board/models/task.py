"""Task data models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DEADLINE_OFFSET = timedelta(days=7)


class TaskStatus(StrEnum):
    """Workflow column a task belongs to.

    Values are the strings stored in the ``status`` field of task documents.
    """

    TODO = "todo"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        """Human readable column name."""
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    TaskStatus.TODO: "To-do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
}


class Difficulty(StrEnum):
    """Task difficulty, ordered from very easy to very hard.

    Each level maps to the experience points awarded on completion and a
    display color.
    """

    VERY_EASY = "veryEasy"
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    VERY_HARD = "veryHard"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    @property
    def label(self) -> str:
        return _DIFFICULTY_LABELS[self]

    @property
    def exp(self) -> int:
        """Experience points awarded for completing a task of this level."""
        return _DIFFICULTY_EXP[self]

    @property
    def color(self) -> str:
        """Hex display color."""
        return _DIFFICULTY_COLORS[self]

    @property
    def slider_value(self) -> float:
        return float(self.rank)

    @classmethod
    def from_slider(cls, value: float) -> Difficulty:
        """Map a 0-4 slider position to the nearest level.

        Positions outside the slider range fall back to EASY.
        """
        index = int(round(value))
        if 0 <= index < len(_DIFFICULTY_ORDER):
            return _DIFFICULTY_ORDER[index]
        return cls.EASY

    @classmethod
    def from_description(cls, description: str) -> Difficulty | None:
        """Look up a level by its label, e.g. ``"Very hard"``."""
        for level, label in _DIFFICULTY_LABELS.items():
            if label == description:
                return level
        return None

    def __lt__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank >= other.rank


_DIFFICULTY_ORDER = [
    Difficulty.VERY_EASY,
    Difficulty.EASY,
    Difficulty.NORMAL,
    Difficulty.HARD,
    Difficulty.VERY_HARD,
]

_DIFFICULTY_LABELS = {
    Difficulty.VERY_EASY: "Very easy",
    Difficulty.EASY: "Easy",
    Difficulty.NORMAL: "Normal",
    Difficulty.HARD: "Hard",
    Difficulty.VERY_HARD: "Very hard",
}

_DIFFICULTY_EXP = {
    Difficulty.VERY_EASY: 5,
    Difficulty.EASY: 10,
    Difficulty.NORMAL: 20,
    Difficulty.HARD: 40,
    Difficulty.VERY_HARD: 80,
}

_DIFFICULTY_COLORS = {
    Difficulty.VERY_EASY: "#ADE258",
    Difficulty.EASY: "#34C759",
    Difficulty.NORMAL: "#FFCC00",
    Difficulty.HARD: "#FF3B30",
    Difficulty.VERY_HARD: "#C20700",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Task(BaseModel):
    """Task model representing one card on the board.

    Field names match the snake_case keys of the ``tasks`` documents.

    Attributes:
        id: Unique identifier, fixed at creation
        team_id: Team that owns the task
        title: Short task title
        description: Free-text description
        created_date: Creation timestamp
        progress: Completion percentage (0-100)
        status: Column the task sits in
        difficulty: Difficulty level
        is_pinned: Pinned tasks sort first in their column
        has_deadline: Whether ``deadline`` is meaningful
        deadline: Deadline timestamp
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), frozen=True)
    team_id: str
    title: str = ""
    description: str = ""
    created_date: datetime = Field(default_factory=_utcnow)
    progress: float = Field(default=0.0, ge=0, le=100)
    status: TaskStatus = TaskStatus.TODO
    difficulty: Difficulty = Difficulty.EASY
    is_pinned: bool = False
    has_deadline: bool = False
    deadline: datetime = Field(
        default_factory=lambda: _utcnow() + DEFAULT_DEADLINE_OFFSET
    )

    @classmethod
    def new(
        cls,
        team_id: str,
        status: TaskStatus,
        deadline: datetime | None = None,
    ) -> Task:
        """Build an unsaved task with default field values.

        Passing a deadline also switches ``has_deadline`` on.
        """
        if deadline is None:
            return cls(team_id=team_id, status=status)
        return cls(team_id=team_id, status=status, has_deadline=True, deadline=deadline)

    def to_document(self) -> dict:
        """Serialize to the document stored remotely."""
        return self.model_dump(mode="python")
