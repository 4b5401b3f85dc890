"""Task editor - model behind the add and edit task screens.

For an existing task every setter writes just its own field remotely as soon
as it changes. A new task is only held locally until ``save()``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

from devban_board.models import Difficulty, Task, TaskStatus
from devban_board.services.session import SessionContext
from devban_board.services.task_service import TaskService


class TaskEditor:
    """Edits one task, new or existing."""

    def __init__(self, task_service: TaskService, task: Task, is_new: bool):
        self.task_service = task_service
        self.task = task
        self.is_new = is_new

    @classmethod
    def for_new(
        cls,
        task_service: TaskService,
        session: SessionContext,
        status: TaskStatus,
        deadline: datetime | None = None,
    ) -> TaskEditor:
        """Start editing a fresh task in ``status``.

        Raises:
            ValueError: If the session has no team
        """
        if session.team_id is None:
            raise ValueError("Cannot create a task without a team")
        return cls(task_service, Task.new(session.team_id, status, deadline), True)

    @classmethod
    def for_existing(cls, task_service: TaskService, task: Task) -> TaskEditor:
        return cls(task_service, task.model_copy(), False)

    @property
    def difficulty_slider(self) -> float:
        return self.task.difficulty.slider_value

    def _push(self, field: str, value) -> asyncio.Task | None:
        if self.is_new:
            return None
        return self.task_service.submit(
            self.task_service.update_fields(self.task.id, {field: value}),
            f"update {field} of task {self.task.id}",
        )

    def set_title(self, title: str) -> asyncio.Task | None:
        self.task.title = title
        return self._push("title", title)

    def set_description(self, description: str) -> asyncio.Task | None:
        self.task.description = description
        return self._push("description", description)

    def set_status(self, status: TaskStatus) -> asyncio.Task | None:
        self.task.status = TaskStatus(status)
        return self._push("status", self.task.status.value)

    def set_difficulty(self, difficulty: Difficulty) -> asyncio.Task | None:
        self.task.difficulty = Difficulty(difficulty)
        return self._push("difficulty", self.task.difficulty.value)

    def set_difficulty_slider(self, value: float) -> asyncio.Task | None:
        return self.set_difficulty(Difficulty.from_slider(value))

    def set_pinned(self, is_pinned: bool) -> asyncio.Task | None:
        self.task.is_pinned = is_pinned
        return self._push("is_pinned", is_pinned)

    def set_has_deadline(self, has_deadline: bool) -> asyncio.Task | None:
        self.task.has_deadline = has_deadline
        return self._push("has_deadline", has_deadline)

    def set_deadline(self, deadline: datetime) -> asyncio.Task | None:
        self.task.deadline = deadline
        return self._push("deadline", deadline)

    def set_progress(self, progress: float) -> asyncio.Task | None:
        """Raises pydantic.ValidationError outside 0-100."""
        self.task.progress = progress
        return self._push("progress", self.task.progress)

    def save(self) -> asyncio.Task:
        """Create the task remotely. Later edits write field by field."""
        task = self.task.model_copy()
        self.is_new = False
        return self.task_service.submit(
            self.task_service.create_task(task), f"create task {task.id}"
        )

    def delete(self) -> asyncio.Task:
        return self.task_service.submit(
            self.task_service.delete_task(self.task.id), f"delete task {self.task.id}"
        )
