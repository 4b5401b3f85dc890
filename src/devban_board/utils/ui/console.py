"""Shared Rich consoles for the devban CLI.

Commands and formatters print through the same console objects, so the
``output`` settings apply to every line the CLI prints.
"""

from __future__ import annotations

from rich.console import Console

from devban_board.models.config_models import OutputConfig

_consoles: dict[bool, Console] = {}


def get_console(highlight: bool = True) -> Console:
    """Get the shared console, with or without automatic highlighting."""
    if highlight not in _consoles:
        _consoles[highlight] = Console(highlight=highlight)
    return _consoles[highlight]


def apply_output_settings(output: OutputConfig) -> None:
    """Apply the ``output`` config section to every shared console."""
    for console in (get_console(True), get_console(False)):
        console.no_color = not output.color
