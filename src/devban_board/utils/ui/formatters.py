"""Output formatters for board columns and messages."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Console
from rich.table import Table
from rich.text import Text

from devban_board.models import Task, TaskStatus
from devban_board.utils.ui.console import get_console

console = get_console()

PIN_ICON = "📌"


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def format_progress(progress: float, width: int = 10) -> str:
    """Render a 0-100 progress value as a text bar."""
    filled = int(round(progress / 100 * width))
    return "█" * filled + "░" * (width - filled) + f" {progress:.0f}%"


def format_task_title(task: Task) -> Text:
    title = task.title or "(untitled)"
    text = Text()
    if task.is_pinned:
        text.append(f"{PIN_ICON} ")
    text.append(title, style="bold" if task.is_pinned else "")
    return text


def build_column_table(
    status: TaskStatus, tasks: list[Task], compact: bool = False
) -> Table:
    """Build a Rich table for one board column.

    Rows keep the order the store delivered them in.
    """
    table = Table(title=f"{status.label} ({len(tasks)})", expand=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("Difficulty")
    if not compact:
        table.add_column("Progress", no_wrap=True)
        table.add_column("Deadline", no_wrap=True)

    for task in tasks:
        difficulty = Text(task.difficulty.label, style=task.difficulty.color)
        row = [task.id[:8], format_task_title(task), difficulty]
        if not compact:
            deadline = (
                task.deadline.strftime("%Y-%m-%d %H:%M") if task.has_deadline else "-"
            )
            row.extend([format_progress(task.progress), deadline])
        table.add_row(*row)

    if not tasks:
        table.caption = "No tasks"
    return table


def format_board(
    columns: dict[TaskStatus, list[Task]],
    compact: bool = False,
    out: Console | None = None,
) -> None:
    """Print several columns side by side."""
    tables = [
        build_column_table(status, tasks, compact=compact)
        for status, tasks in columns.items()
    ]
    (out or console).print(Columns(tables, expand=True))
