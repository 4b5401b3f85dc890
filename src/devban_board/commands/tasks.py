"""Task commands - create, edit, move and delete tasks."""

from datetime import UTC, datetime

import typer

from devban_board.models import Difficulty, Task, TaskStatus
from devban_board.services.drag_drop import DropHandler, encode_task_token
from devban_board.utils.background import drain
from devban_board.utils.typer_helpers import SuggestingGroup
from devban_board.utils.ui.console import get_console
from devban_board.utils.ui.formatters import format_info, format_progress, format_success

from .decorators import command_wrapper
from .utils import open_board, resolve_task

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")
console = get_console()


def _to_utc(value: datetime) -> datetime:
    # Typer parses naive datetimes; read them as local time
    return value.astimezone(UTC)


def _print_task(task: Task) -> None:
    pin = " 📌" if task.is_pinned else ""
    console.print(f"[bold]{task.title or '(untitled)'}[/bold]{pin}")
    console.print(f"  id:          {task.id}")
    console.print(f"  status:      {task.status.label}")
    console.print(
        f"  difficulty:  [{task.difficulty.color}]{task.difficulty.label}[/] "
        f"({task.difficulty.exp} xp)"
    )
    console.print(f"  progress:    {format_progress(task.progress)}")
    if task.has_deadline:
        console.print(f"  deadline:    {task.deadline:%Y-%m-%d %H:%M}")
    console.print(f"  created:     {task.created_date:%Y-%m-%d %H:%M}")
    if task.description:
        console.print()
        console.print(task.description)


@app.command("add")
@command_wrapper
async def add_task(
    title: str = typer.Argument(..., help="Task title"),
    status: TaskStatus = typer.Option(TaskStatus.TODO, "--status", "-s"),
    description: str = typer.Option("", "--description", "-d"),
    difficulty: Difficulty = typer.Option(Difficulty.EASY, "--difficulty"),
    pin: bool = typer.Option(False, "--pin", help="Pin to the top of the column"),
    deadline: datetime | None = typer.Option(None, "--deadline"),
) -> None:
    """Create a task."""
    async with open_board() as board:
        team_id = board.require_team()
        task = Task.new(team_id, status, _to_utc(deadline) if deadline else None)
        task.title = title
        task.description = description
        task.difficulty = difficulty
        task.is_pinned = pin
        await board.tasks.create_task(task)
        format_success(f"Task created: {task.id}")


@app.command("show")
@command_wrapper
async def show_task(task_id: str = typer.Argument(..., help="Task ID or prefix")) -> None:
    """Show a task."""
    async with open_board() as board:
        _print_task(await resolve_task(board, task_id))


@app.command("edit")
@command_wrapper
async def edit_task(
    task_id: str = typer.Argument(..., help="Task ID or prefix"),
    title: str | None = typer.Option(None, "--title"),
    description: str | None = typer.Option(None, "--description", "-d"),
    difficulty: Difficulty | None = typer.Option(None, "--difficulty"),
    progress: float | None = typer.Option(None, "--progress", min=0, max=100),
    pin: bool | None = typer.Option(None, "--pin/--unpin"),
    deadline: datetime | None = typer.Option(None, "--deadline"),
    no_deadline: bool = typer.Option(False, "--no-deadline"),
) -> None:
    """Edit fields of a task. Each option is written as its own update."""
    async with open_board() as board:
        task = await resolve_task(board, task_id)
        service = board.tasks
        changed = []
        if title is not None:
            await service.update_title(task.id, title)
            changed.append("title")
        if description is not None:
            await service.update_description(task.id, description)
            changed.append("description")
        if difficulty is not None:
            await service.update_difficulty(task.id, difficulty)
            changed.append("difficulty")
        if progress is not None:
            await service.update_progress(task.id, progress)
            changed.append("progress")
        if pin is not None:
            await service.update_is_pinned(task.id, pin)
            changed.append("pinned")
        if deadline is not None:
            await service.update_deadline(task.id, _to_utc(deadline))
            await service.update_has_deadline(task.id, True)
            changed.append("deadline")
        elif no_deadline:
            await service.update_has_deadline(task.id, False)
            changed.append("deadline")

        if changed:
            format_success(f"Updated {', '.join(changed)} of {task.id}")
        else:
            format_info("Nothing to update")


@app.command("move")
@command_wrapper
async def move_task(
    task_id: str = typer.Argument(..., help="Task ID or prefix"),
    status: TaskStatus = typer.Argument(..., help="Target column"),
) -> None:
    """Move a task to another column."""
    async with open_board() as board:
        task = await resolve_task(board, task_id)
        await board.tasks.update_status(task.id, status)
        format_success(f"Moved {task.id} to {status.label}")


@app.command("drop")
@command_wrapper
async def drop_payload(
    payload: list[str] = typer.Argument(..., help="Dropped text, e.g. 'Task <id>'"),
    status: TaskStatus = typer.Option(..., "--status", "-s", help="Receiving column"),
) -> None:
    """Apply drag payloads to a column, as a drop zone would."""
    async with open_board() as board:
        scheduled = DropHandler(board.tasks, status).handle_drop(payload)
        await drain()
        format_info(f"{len(scheduled)} of {len(payload)} payload(s) applied")


@app.command("token")
def task_token(task_id: str = typer.Argument(..., help="Task ID")) -> None:
    """Print the drag payload for a task."""
    console.print(encode_task_token(task_id), highlight=False)


@app.command("complete")
@command_wrapper
async def complete_task(task_id: str = typer.Argument(..., help="Task ID or prefix")) -> None:
    """Mark a task completed and collect its experience points."""
    async with open_board() as board:
        task = await resolve_task(board, task_id)
        await board.tasks.complete_task(task, board.session)
        format_success(f"Completed {task.id} (+{task.difficulty.exp} xp)")


@app.command("reopen")
@command_wrapper
async def reopen_task(task_id: str = typer.Argument(..., help="Task ID or prefix")) -> None:
    """Move a completed task back to In Progress."""
    async with open_board() as board:
        task = await resolve_task(board, task_id)
        await board.tasks.uncomplete_task(task, board.session)
        format_success(f"Reopened {task.id} (-{task.difficulty.exp} xp)")


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID or prefix"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    async with open_board() as board:
        task = await resolve_task(board, task_id)
        if not force:
            if not typer.confirm(f"Delete task '{task.title}'?"):
                format_info("Cancelled")
                raise typer.Exit(0)
        await board.tasks.delete_task(task.id)
        format_success(f"Task deleted: {task.id}")
