"""Per-column task list state.

A read-mostly projection of the store for one column. Mutations are
forwarded to the store without touching the local list; the next snapshot
from the feed is the only thing that changes what the column shows.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from devban_board.models import Task, TaskStatus
from devban_board.repositories.repository import DocumentStore
from devban_board.services.session import SessionContext
from devban_board.services.task_feed import RemoteTaskFeed
from devban_board.services.task_service import TaskService


class TaskListState:
    """Task list backing one board column."""

    def __init__(
        self,
        store: DocumentStore,
        session: SessionContext,
        status: TaskStatus,
        on_change: Callable[[list[Task]], None] | None = None,
        task_service: TaskService | None = None,
    ):
        self.status = TaskStatus(status)
        self.task_service = task_service or TaskService(store)
        self.feed = RemoteTaskFeed(store, session, self.status, on_change=on_change)

    def current_tasks(self) -> list[Task]:
        """Latest snapshot, or an empty list before the first one."""
        return self.feed.tasks

    def request_delete(self, task_id: str) -> asyncio.Task:
        """Delete a task remotely without waiting for the outcome."""
        return self.task_service.submit(
            self.task_service.delete_task(task_id), f"delete task {task_id}"
        )

    def request_status_change(
        self, task_id: str, new_status: TaskStatus
    ) -> asyncio.Task:
        """Move a task to another column without waiting for the outcome."""
        new_status = TaskStatus(new_status)
        return self.task_service.submit(
            self.task_service.update_status(task_id, new_status),
            f"set status of task {task_id} to {new_status.value}",
        )

    def close(self) -> None:
        self.feed.close()

    def __enter__(self) -> TaskListState:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
