"""Drag-and-drop reassignment of tasks between columns.

A dragged task travels as the plain-text payload ``"Task <id>"``. Payloads
are decoded once, at the drop boundary, into a tagged union so that a drop
zone can accept several kinds of token and ignore the ones it does not use.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass

from devban_board.models import TaskStatus
from devban_board.services.task_service import TaskService
from devban_board.utils.logger import get_logger

TASK_PREFIX = "Task"
TAG_PREFIX = "Tag"


@dataclass(frozen=True)
class TaskToken:
    task_id: str


@dataclass(frozen=True)
class TagToken:
    tag_id: str


@dataclass(frozen=True)
class UnknownToken:
    raw: str


DragPayload = TaskToken | TagToken | UnknownToken


def encode_task_token(task_id: str) -> str:
    """Build the drag payload for a task.

    Raises:
        ValueError: If the id is empty or contains whitespace, which the
            payload format cannot carry
    """
    if not task_id or any(ch.isspace() for ch in task_id):
        raise ValueError(f"task id cannot be used in a drag payload: {task_id!r}")
    return f"{TASK_PREFIX} {task_id}"


def decode_payload(text: str) -> DragPayload:
    """Decode a dropped string. Anything unrecognised becomes UnknownToken."""
    parts = text.split()
    if len(parts) < 2:
        return UnknownToken(text)
    kind, ident = parts[0], parts[1]
    if kind == TASK_PREFIX:
        return TaskToken(ident)
    if kind == TAG_PREFIX:
        return TagToken(ident)
    return UnknownToken(text)


class DropHandler:
    """Drop zone of one column.

    Each dropped task token becomes one independent fire-and-forget status
    update to the column's status. Dropping a task on the column it is
    already in still writes the (unchanged) status.
    """

    def __init__(self, task_service: TaskService, status: TaskStatus):
        self.task_service = task_service
        self.status = TaskStatus(status)

    def handle_drop(self, payloads: Iterable[str]) -> list[asyncio.Task]:
        """Apply dropped payloads; returns the scheduled writes."""
        scheduled = []
        for text in payloads:
            match decode_payload(text):
                case TaskToken(task_id=task_id):
                    scheduled.append(
                        self.task_service.submit(
                            self.task_service.update_status(task_id, self.status),
                            f"drop task {task_id} on {self.status.value}",
                        )
                    )
                case TagToken(tag_id=tag_id):
                    get_logger(__name__).debug(
                        "ignoring tag %s dropped on %s", tag_id, self.status.value
                    )
                case UnknownToken():
                    pass
        return scheduled
