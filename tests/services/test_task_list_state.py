"""Unit tests for TaskListState - per-column list and its mutation requests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_task, seed, settle
from devban_board.models import TaskStatus
from devban_board.services.task_list_state import TaskListState
from devban_board.services.task_service import TaskService
from devban_board.utils.background import drain


@pytest.mark.asyncio
async def test_current_tasks_follow_snapshots(store, session):
    await seed(store, make_task("a"))
    state = TaskListState(store, session, TaskStatus.TODO)
    assert state.current_tasks() == []

    await settle()
    assert [t.id for t in state.current_tasks()] == ["a"]
    state.close()


@pytest.mark.asyncio
async def test_delete_does_not_touch_local_list(store, session):
    await seed(store, make_task("a"), make_task("b", created_offset=1))
    state = TaskListState(store, session, TaskStatus.TODO)
    await settle()

    write = state.request_delete("a")
    # Still showing both until the store reports the change
    assert [t.id for t in state.current_tasks()] == ["b", "a"]

    await write
    await settle()
    assert [t.id for t in state.current_tasks()] == ["b"]
    assert "a" not in store.documents("tasks")
    state.close()


@pytest.mark.asyncio
async def test_status_change_moves_task_to_other_column(store, session):
    await seed(store, make_task("a"))
    todo = TaskListState(store, session, TaskStatus.TODO)
    in_progress = TaskListState(store, session, TaskStatus.IN_PROGRESS)
    await settle()

    todo.request_status_change("a", TaskStatus.IN_PROGRESS)
    await drain()
    await settle()

    assert todo.current_tasks() == []
    assert [t.id for t in in_progress.current_tasks()] == ["a"]
    assert store.documents("tasks")["a"]["status"] == "inProgress"
    todo.close()
    in_progress.close()


@pytest.mark.asyncio
async def test_failed_write_is_logged_not_raised(store, session):
    await seed(store, make_task("a"))
    service = TaskService(store)
    service.update_status = AsyncMock(side_effect=RuntimeError("offline"))
    logger = MagicMock()
    state = TaskListState(store, session, TaskStatus.TODO, task_service=service)
    await settle()

    with patch("devban_board.utils.background.get_logger", return_value=logger):
        ok = await state.request_status_change("a", TaskStatus.COMPLETED)

    assert ok is False
    logger.error.assert_called_once()
    # Nothing rolled back or changed locally
    assert [t.id for t in state.current_tasks()] == ["a"]
    state.close()


@pytest.mark.asyncio
async def test_request_on_missing_task_fails_quietly(store, session):
    state = TaskListState(store, session, TaskStatus.TODO)
    assert await state.request_status_change("ghost", TaskStatus.COMPLETED) is False
    state.close()


@pytest.mark.asyncio
async def test_context_manager_closes_feed(store, session):
    with TaskListState(store, session, TaskStatus.TODO) as state:
        await settle()
    assert not state.feed.is_subscribed
    assert store.listener_count == 0
