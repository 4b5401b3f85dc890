"""Configuration management commands."""

import json

import typer

from devban_board.services.config_service import get_config_service
from devban_board.utils.exit_codes import ERROR_INVALID_ARGS
from devban_board.utils.typer_helpers import SuggestingGroup
from devban_board.utils.ui.console import get_console
from devban_board.utils.ui.formatters import format_info, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


@app.command("view")
@command_wrapper
def view_config() -> None:
    """View current configuration."""
    config_service = get_config_service()
    data = config_service.config.model_dump(mode="json")
    if data["session"].get("token"):
        data["session"]["token"] = "********"
    console.print_json(json.dumps(data))
    console.print(f"[dim]{config_service.config_path}[/dim]")


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., sync.poll_interval)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found", ERROR_INVALID_ARGS)
    console.print(value, highlight=False)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., backend)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    try:
        get_config_service().set(key, value)
    except KeyError as e:
        raise AppError(f"Unknown configuration key '{key}'", ERROR_INVALID_ARGS) from e
    format_success(f"Configuration '{key}' updated")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes and not typer.confirm("Are you sure you want to reset the configuration?"):
        format_info("Cancelled")
        raise typer.Exit(0)
    get_config_service().reset_config()
    format_success("Configuration reset to defaults")
