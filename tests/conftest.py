"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/store state.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from devban_board.adapters.memory import InMemoryDocumentStore
from devban_board.models import Difficulty, Task, TaskStatus
from devban_board.services.session import SessionContext

TEAM_ID = "team-1"
UID = "user-1"


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_logger(tmp_path):
    """Send log output to a temporary directory and reset the logger singleton."""
    import logging

    import devban_board.utils.logger as logger_mod

    logger_mod._logger = None
    logging.getLogger(logger_mod._APP_NAME).handlers.clear()
    with patch(
        "devban_board.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")
    ):
        yield
    for handler in logging.getLogger(logger_mod._APP_NAME).handlers:
        handler.close()
    logging.getLogger(logger_mod._APP_NAME).handlers.clear()
    logger_mod._logger = None


@pytest.fixture(autouse=True)
def clear_pending_writes():
    """Forget background writes left behind by a previous event loop."""
    from devban_board.utils import background

    background._pending.clear()
    yield
    background._pending.clear()


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from devban_board.services.config_service import get_config_service

    tmpdir = str(tmp_path / "config")
    get_config_service.cache_clear()
    with patch("devban_board.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("devban_board.services.config_service.user_data_dir", return_value=tmpdir):
            # Every module importing get_config_service now shares this instance
            yield get_config_service()
    get_config_service.cache_clear()


# ---------------------------------------------------------------------------
# Store, session and tasks
# ---------------------------------------------------------------------------


@pytest.fixture()
def store():
    return InMemoryDocumentStore()


@pytest.fixture()
def session():
    return SessionContext(uid=UID, display_name="Tester", team_id=TEAM_ID)


@pytest.fixture()
def no_team_session():
    return SessionContext(uid=UID, display_name="Tester")


def make_task(
    task_id: str,
    *,
    status: TaskStatus = TaskStatus.TODO,
    team_id: str = TEAM_ID,
    title: str = "",
    is_pinned: bool = False,
    created_offset: int = 0,
    difficulty: Difficulty = Difficulty.EASY,
) -> Task:
    """Build a task; a larger ``created_offset`` means a newer task."""
    from datetime import UTC, datetime, timedelta

    base = datetime(2024, 1, 1, tzinfo=UTC)
    return Task(
        id=task_id,
        team_id=team_id,
        title=title or task_id,
        status=status,
        is_pinned=is_pinned,
        difficulty=difficulty,
        created_date=base + timedelta(minutes=created_offset),
    )


async def seed(store: InMemoryDocumentStore, *tasks: Task) -> None:
    for task in tasks:
        await store.create("tasks", task.id, task.to_document())


async def settle() -> None:
    """Let callbacks scheduled with call_soon run."""
    for _ in range(5):
        await asyncio.sleep(0)
