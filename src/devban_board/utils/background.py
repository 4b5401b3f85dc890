"""Background runner for fire-and-forget remote writes.

Writes triggered by board interactions are never awaited by the code that
starts them. The outcome is only logged: failures do not propagate and no
local state is rolled back.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from devban_board.utils.logger import get_logger

# Strong references so pending writes are not garbage collected mid-flight.
_pending: set[asyncio.Task] = set()


def fire_and_forget(
    coro: Coroutine[Any, Any, Any], description: str
) -> asyncio.Task:
    """Schedule ``coro`` on the running loop without awaiting it.

    Args:
        coro: Remote operation to run
        description: Short label used in log lines, e.g. "delete task abc"

    Returns:
        The scheduled task. Callers may keep it to observe completion, but
        awaiting it never raises: failures are consumed by the logger.
    """
    task = asyncio.get_running_loop().create_task(_run(coro, description))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def _run(coro: Coroutine[Any, Any, Any], description: str) -> bool:
    logger = get_logger(__name__)
    try:
        await coro
    except asyncio.CancelledError:
        logger.warning("background write cancelled: %s", description)
        raise
    except Exception as e:
        logger.error("background write failed: %s - %s", description, e)
        return False
    logger.debug("background write completed: %s", description)
    return True


def pending_count() -> int:
    """Number of writes still in flight."""
    return len(_pending)


async def drain() -> None:
    """Wait for every in-flight write to settle."""
    while _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)
