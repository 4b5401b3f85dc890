"""Task service - remote operations on task documents.

Every edit is a partial update naming exactly one field, so concurrent
edits of different fields by different viewers never overwrite each other.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from datetime import datetime
from typing import Any

from devban_board.models import Difficulty, Task, TaskStatus
from devban_board.repositories.repository import DocumentStore
from devban_board.services.session import SessionContext
from devban_board.utils.background import fire_and_forget

TASKS = "tasks"


class TaskService:
    """Service for task persistence through the document store."""

    def __init__(self, store: DocumentStore):
        """Initialize the task service.

        Args:
            store: Document store holding the ``tasks`` collection
        """
        self.store = store

    async def get_task(self, task_id: str) -> Task:
        """Fetch one task.

        Raises:
            NotFoundError: If the task does not exist
        """
        document = await self.store.get(TASKS, task_id)
        return Task.model_validate({"id": task_id, **document})

    async def create_task(self, task: Task) -> Task:
        """Persist a new task under its own id.

        Raises:
            AlreadyExistsError: If a task with the same id exists
        """
        await self.store.create(TASKS, task.id, task.to_document())
        return task

    async def delete_task(self, task_id: str) -> None:
        await self.store.delete(TASKS, task_id)

    async def update_fields(self, task_id: str, fields: dict[str, Any]) -> None:
        """Send one partial update carrying exactly ``fields``."""
        await self.store.update_fields(TASKS, task_id, fields)

    async def update_title(self, task_id: str, title: str) -> None:
        await self.update_fields(task_id, {"title": title})

    async def update_description(self, task_id: str, description: str) -> None:
        await self.update_fields(task_id, {"description": description})

    async def update_status(self, task_id: str, status: TaskStatus) -> None:
        await self.update_fields(task_id, {"status": TaskStatus(status).value})

    async def update_difficulty(self, task_id: str, difficulty: Difficulty) -> None:
        await self.update_fields(task_id, {"difficulty": Difficulty(difficulty).value})

    async def update_is_pinned(self, task_id: str, is_pinned: bool) -> None:
        await self.update_fields(task_id, {"is_pinned": is_pinned})

    async def update_has_deadline(self, task_id: str, has_deadline: bool) -> None:
        await self.update_fields(task_id, {"has_deadline": has_deadline})

    async def update_deadline(self, task_id: str, deadline: datetime) -> None:
        await self.update_fields(task_id, {"deadline": deadline})

    async def update_progress(self, task_id: str, progress: float) -> None:
        """Set progress.

        Raises:
            ValueError: If progress is outside 0-100
        """
        if not 0 <= progress <= 100:
            raise ValueError(f"progress must be between 0 and 100, got {progress}")
        await self.update_fields(task_id, {"progress": float(progress)})

    async def complete_task(self, task: Task, session: SessionContext) -> None:
        """Move a task to Completed and award its difficulty's points.

        Raises:
            ValueError: If the task is already completed
        """
        if task.status is TaskStatus.COMPLETED:
            raise ValueError(f"Task {task.id} is already completed")
        await self.update_status(task.id, TaskStatus.COMPLETED)
        await session.add_exp(self.store, task.difficulty.exp)

    async def uncomplete_task(self, task: Task, session: SessionContext) -> None:
        """Move a completed task back to In Progress and take its points back.

        Raises:
            ValueError: If the task is not completed
        """
        if task.status is not TaskStatus.COMPLETED:
            raise ValueError(f"Task {task.id} is not completed")
        await self.update_status(task.id, TaskStatus.IN_PROGRESS)
        await session.add_exp(self.store, -task.difficulty.exp)

    def submit(
        self, coro: Coroutine[Any, Any, Any], description: str
    ) -> asyncio.Task:
        """Run one of the operations above without awaiting it."""
        return fire_and_forget(coro, description)
