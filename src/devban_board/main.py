"""Main entry point for the devban CLI."""

import typer

from devban_board import __version__
from devban_board.commands import board, config, tasks, team
from devban_board.commands.decorators import command_wrapper
from devban_board.commands.utils import open_board
from devban_board.services.config_service import get_config_service
from devban_board.utils.logger import log_file_path
from devban_board.utils.typer_helpers import SuggestingGroup
from devban_board.utils.ui.console import apply_output_settings, get_console

# Create main app with custom group class
app = typer.Typer(
    name="devban",
    cls=SuggestingGroup,
    help="A shared kanban board that stays in sync across every viewer",
    no_args_is_help=True,
)

console = get_console()


@app.callback()
def main_callback() -> None:
    """A shared kanban board that stays in sync across every viewer."""
    apply_output_settings(get_config_service().config.output)


# Add subcommands
app.add_typer(board.app, name="board", help="Show the task board")
app.add_typer(tasks.app, name="task", help="Task management commands")
app.add_typer(team.app, name="team", help="Team management commands")
app.add_typer(config.app, name="config", help="Configuration management")


# Add top-level commands
@app.command()
def version() -> None:
    """Show version information and the configured backend."""
    console.print(f"[bold]devban[/bold] version [cyan]{__version__}[/cyan]")
    config = get_config_service().config
    if config.backend == "firestore":
        project = config.firestore.project_id or "[yellow]not set[/yellow]"
        console.print(f"backend: firestore ({project})")
    else:
        console.print("backend: local")
    console.print(f"log: {log_file_path()}", highlight=False)


@app.command()
@command_wrapper
async def whoami() -> None:
    """Show the signed-in user and their team."""
    async with open_board() as board:
        session = board.session
    console.print(f"[bold]{session.display_name or session.uid}[/bold]")
    console.print(f"  uid:   {session.uid}")
    console.print(f"  team:  {session.team_id or '-'}")
    console.print(f"  exp:   {session.exp}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
