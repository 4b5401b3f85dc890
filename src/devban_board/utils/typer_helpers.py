"""Typer helper utilities."""

from difflib import get_close_matches

import typer
from typer.core import TyperGroup

from devban_board.utils.ui.console import get_console


def suggest_commands(attempted: str, commands: list[str], limit: int = 3) -> list[str]:
    """Commands the user probably meant: prefix matches first, then close spellings."""
    prefixed = sorted(name for name in commands if name.startswith(attempted))
    close = get_close_matches(attempted, commands, n=limit, cutoff=0.6)
    suggestions = prefixed + [name for name in close if name not in prefixed]
    return suggestions[:limit]


class SuggestingGroup(TyperGroup):
    """Typer group that answers an unknown command with its nearest names."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except Exception as e:
            if not args:
                raise
            attempted = args[0]
            suggestions = suggest_commands(attempted, list(self.commands))
            if not suggestions:
                raise

            console = get_console()
            console.print(
                f'[red]Error:[/red] unknown command "{attempted}" for "{ctx.info_name}"'
            )
            console.print()
            if len(suggestions) == 1:
                console.print("[yellow]Did you mean this?[/yellow]")
            else:
                console.print("[yellow]Did you mean one of these?[/yellow]")
            for suggestion in suggestions:
                console.print(f"        {suggestion}")
            raise typer.Exit(1) from e
