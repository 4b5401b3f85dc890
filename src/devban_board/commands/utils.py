"""Shared helpers for commands."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from devban_board.adapters import create_document_store
from devban_board.models import Task, TaskStatus
from devban_board.repositories.repository import DocumentStore, NotFoundError
from devban_board.services.config_service import get_config_service
from devban_board.services.session import SessionContext
from devban_board.services.task_feed import FeedState, RemoteTaskFeed
from devban_board.services.task_service import TaskService
from devban_board.utils.background import drain
from devban_board.utils.exit_codes import ERROR_AUTH_FAILURE, ERROR_INVALID_ARGS

from .decorators import AppError


@dataclass
class Board:
    """Store, session and services for one command invocation."""

    store: DocumentStore
    session: SessionContext

    @property
    def tasks(self) -> TaskService:
        return TaskService(self.store)

    def require_team(self) -> str:
        if self.session.team_id is None:
            raise AppError(
                "You are not in a team. Use 'devban team join <code>' first.",
                ERROR_AUTH_FAILURE,
            )
        return self.session.team_id


@asynccontextmanager
async def open_board() -> AsyncIterator[Board]:
    """Open the configured store and load the signed-in user's session."""
    config_service = get_config_service()
    config = config_service.config
    uid = config.session.uid
    if not uid:
        raise AppError(
            "Not signed in. Use 'devban config set session.uid <uid>'.",
            ERROR_AUTH_FAILURE,
        )

    store = create_document_store(config, config_service.data_dir)
    try:
        session = await SessionContext.load(store, uid)
        yield Board(store=store, session=session)
    finally:
        # In-flight writes run to completion before the loop shuts down
        await drain()
        await store.close()


async def fetch_column(
    board: Board, status: TaskStatus, timeout: float = 30.0
) -> list[Task]:
    """Return the first snapshot of one column and unsubscribe."""
    received = asyncio.Event()
    feed = RemoteTaskFeed(
        board.store, board.session, status, on_change=lambda _tasks: received.set()
    )
    try:
        if feed.state is FeedState.IDLE:
            return []
        await asyncio.wait_for(received.wait(), timeout=timeout)
        return feed.tasks
    finally:
        feed.close()


async def resolve_task(board: Board, ref: str) -> Task:
    """Find a task by full id, or by a unique id prefix within the team.

    Raises:
        NotFoundError: If nothing matches
        AppError: If the prefix matches more than one task
    """
    try:
        return await board.tasks.get_task(ref)
    except NotFoundError:
        pass

    columns = await asyncio.gather(
        *(fetch_column(board, status) for status in TaskStatus)
    )
    matches = [task for tasks in columns for task in tasks if task.id.startswith(ref)]
    if not matches:
        raise NotFoundError(f"Task '{ref}' not found")
    if len(matches) > 1:
        raise AppError(
            f"Task id '{ref}' is ambiguous ({len(matches)} matches)",
            ERROR_INVALID_ARGS,
        )
    return matches[0]
