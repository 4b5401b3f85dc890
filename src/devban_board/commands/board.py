"""Board commands - display columns from live snapshots."""

import asyncio

import typer
from rich.columns import Columns
from rich.live import Live

from devban_board.models import Task, TaskStatus
from devban_board.services.config_service import get_config_service
from devban_board.services.task_list_state import TaskListState
from devban_board.utils.typer_helpers import SuggestingGroup
from devban_board.utils.ui.console import get_console
from devban_board.utils.ui.formatters import build_column_table, format_board

from .decorators import command_wrapper
from .utils import fetch_column, open_board

app = typer.Typer(cls=SuggestingGroup, help="Show the task board")
console = get_console()


def _statuses(status: TaskStatus | None) -> list[TaskStatus]:
    return [status] if status is not None else list(TaskStatus)


@app.command("show")
@command_wrapper
async def show_board(
    status: TaskStatus | None = typer.Option(
        None, "--status", "-s", help="Only show this column"
    ),
) -> None:
    """Print the board once, from each column's first snapshot."""
    compact = get_config_service().config.output.compact
    async with open_board() as board:
        board.require_team()
        statuses = _statuses(status)
        snapshots = await asyncio.gather(
            *(fetch_column(board, column) for column in statuses)
        )
        format_board(dict(zip(statuses, snapshots)), compact=compact, out=console)


@app.command("watch")
@command_wrapper
async def watch_board(
    status: TaskStatus | None = typer.Option(
        None, "--status", "-s", help="Only watch this column"
    ),
    duration: float | None = typer.Option(
        None, "--duration", "-d", help="Stop after this many seconds"
    ),
) -> None:
    """Re-render columns on every snapshot until interrupted."""
    compact = get_config_service().config.output.compact
    async with open_board() as board:
        board.require_team()
        columns: dict[TaskStatus, list[Task]] = {s: [] for s in _statuses(status)}
        states: list[TaskListState] = []

        with Live(console=console, auto_refresh=False) as live:

            def render(column: TaskStatus, tasks: list[Task]) -> None:
                columns[column] = tasks
                tables = [
                    build_column_table(s, t, compact=compact)
                    for s, t in columns.items()
                ]
                live.update(Columns(tables, expand=True), refresh=True)

            try:
                for column in columns:
                    states.append(
                        TaskListState(
                            board.store,
                            board.session,
                            column,
                            on_change=lambda tasks, column=column: render(column, tasks),
                        )
                    )
                stop = asyncio.Event()
                if duration is None:
                    await stop.wait()
                else:
                    try:
                        await asyncio.wait_for(stop.wait(), timeout=duration)
                    except TimeoutError:
                        pass
            finally:
                for state in states:
                    state.close()
