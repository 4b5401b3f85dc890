"""Live task feed for one board column.

The feed holds one store subscription for the tasks of a team in a given
status and republishes the decoded, store-ordered list on every change.
Each snapshot replaces the previous list entirely.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from pydantic import ValidationError

from devban_board.models import Task, TaskStatus
from devban_board.repositories.repository import (
    Document,
    DocumentStore,
    ListenerRegistration,
    Query,
)
from devban_board.services.session import SessionContext
from devban_board.services.task_service import TASKS
from devban_board.utils.logger import get_logger

# Pinned first, then newest first. The store applies this; the feed never re-sorts.
COLUMN_ORDER = (("is_pinned", True), ("created_date", True))


class FeedState(Enum):
    IDLE = "idle"
    AWAITING_FIRST_SNAPSHOT = "awaiting_first_snapshot"
    HAS_DATA = "has_data"
    CLOSED = "closed"


def column_query(team_id: str, status: TaskStatus) -> Query:
    return Query(
        collection=TASKS,
        where=(("team_id", team_id), ("status", TaskStatus(status).value)),
        order_by=COLUMN_ORDER,
    )


class RemoteTaskFeed:
    """Subscription to the tasks of one team and status.

    Without a team the feed never subscribes and stays idle; that is a valid
    state, not an error. Stream errors are logged and leave the last list in
    place; the feed does not retry. A closed feed cannot be reopened; build a
    new one instead.
    """

    def __init__(
        self,
        store: DocumentStore,
        session: SessionContext,
        status: TaskStatus,
        on_change: Callable[[list[Task]], None] | None = None,
    ):
        self.status = TaskStatus(status)
        self.team_id = session.team_id
        self._on_change = on_change
        self._tasks: list[Task] = []
        self._registration: ListenerRegistration | None = None
        self._state = FeedState.IDLE
        self._logger = get_logger(__name__)

        if self.team_id is None:
            self._logger.debug("task feed %s idle: no team", self.status.value)
            return

        self._state = FeedState.AWAITING_FIRST_SNAPSHOT
        self._registration = store.subscribe(
            column_query(self.team_id, self.status),
            self._handle_snapshot,
            self._handle_error,
        )

    @property
    def tasks(self) -> list[Task]:
        """Most recent snapshot, empty before the first one arrives."""
        return list(self._tasks)

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def is_subscribed(self) -> bool:
        return self._registration is not None and self._state is not FeedState.CLOSED

    def _handle_snapshot(self, documents: list[Document]) -> None:
        if self._state is FeedState.CLOSED:
            return

        tasks = []
        for document in documents:
            try:
                tasks.append(Task.model_validate(document))
            except ValidationError as e:
                self._logger.warning(
                    "skipping undecodable task %s: %s", document.get("id"), e
                )

        self._tasks = tasks
        self._state = FeedState.HAS_DATA
        if self._on_change is not None:
            self._on_change(self.tasks)

    def _handle_error(self, error: Exception) -> None:
        if self._state is FeedState.CLOSED:
            return
        self._logger.error(
            "task feed %s/%s listener error: %s", self.team_id, self.status.value, error
        )

    def close(self) -> None:
        """Cancel the subscription. Safe to call more than once."""
        if self._registration is not None:
            self._registration.remove()
            self._registration = None
        self._state = FeedState.CLOSED

    def __enter__(self) -> RemoteTaskFeed:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
