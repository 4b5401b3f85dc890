"""Team commands - create, invite, join and leave."""

import typer
from rich.table import Table

from devban_board.models import TeamRole
from devban_board.services.team_service import TeamService
from devban_board.utils.typer_helpers import SuggestingGroup
from devban_board.utils.ui.console import get_console
from devban_board.utils.ui.formatters import format_info, format_success

from .decorators import command_wrapper
from .utils import open_board

app = typer.Typer(cls=SuggestingGroup, help="Team management commands")
console = get_console()


@app.command("show")
@command_wrapper
async def show_team() -> None:
    """Show the current team and its members."""
    async with open_board() as board:
        team = await TeamService(board.store).get_team(board.require_team())

    table = Table(title=team.team_name, show_header=True, header_style="bold")
    table.add_column("Member")
    table.add_column("Role")
    for uid, role in sorted(team.members.items()):
        name = f"{uid} (you)" if uid == board.session.uid else uid
        table.add_row(name, role.value, style="bold" if team.is_admin(uid) else "")
    console.print(table)

    role = team.role_of(board.session.uid)
    if role is None:
        format_info("You are not listed as a member of this team")
    elif role is TeamRole.ADMIN:
        format_info("You are the team admin")


@app.command("create")
@command_wrapper
async def create_team(
    name: str = typer.Argument(..., help="Team name"),
    license_id: str = typer.Option(..., "--license", "-l", help="License key"),
) -> None:
    """Create a team and become its admin."""
    async with open_board() as board:
        session = await TeamService(board.store).create_team(
            board.session, name, license_id
        )
        format_success(f"Team '{name}' created: {session.team_id}")


@app.command("invite")
@command_wrapper
async def invite() -> None:
    """Generate an invite code, valid for seven days."""
    async with open_board() as board:
        code = await TeamService(board.store).generate_invite_code(board.session)
    format_success("Invite code generated")
    console.print(code, highlight=False)


@app.command("join")
@command_wrapper
async def join_team(code: str = typer.Argument(..., help="Invite code")) -> None:
    """Join a team with an invite code."""
    async with open_board() as board:
        session = await TeamService(board.store).redeem_invite_code(board.session, code)
        format_success(f"Joined team {session.team_id}")


@app.command("quit")
@command_wrapper
async def quit_team(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Leave the current team."""
    async with open_board() as board:
        if not yes and not typer.confirm("Are you sure you want to leave your team?"):
            format_info("Cancelled")
            raise typer.Exit(0)
        await TeamService(board.store).quit_team(board.session)
        format_success("You left the team")
