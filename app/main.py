"""
Main application entry point for the scheduler console.

Provides the CLI for signing in and browsing the scheduler.
"""

import sys
from typing import Optional

import click
from rich.table import Table

from app.cli_commands.common import console, run_with_console
from app.cli_commands.doctor import doctor
from app.cli_commands.resources import executors, groups, instances, stats, tasks, trigger
from app.console import Console
from app.core.config import print_configuration_summary, validate_required_settings
from app.core.logging import set_correlation_id, setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--correlation-id", help="Set correlation ID for request tracing")
@click.pass_context
def main(ctx, debug: bool, correlation_id: Optional[str]):
    """Operator console for the distributed task scheduler."""
    ctx.ensure_object(dict)

    setup_logging(debug=debug, rich_output=True)

    if correlation_id:
        set_correlation_id(correlation_id)

    ctx.obj["debug"] = debug
    ctx.obj["correlation_id"] = correlation_id


main.add_command(tasks)
main.add_command(groups)
main.add_command(instances)
main.add_command(executors)
main.add_command(stats)
main.add_command(trigger)
main.add_command(doctor)


@main.command()
@click.option("--username", prompt=True, help="Operator user name")
@click.option("--password", prompt=True, hide_input=True, help="Operator password")
@click.pass_context
def login(ctx, username: str, password: str):
    """Sign in and store the session token."""

    async def _login(app: Console):
        session = await app.session.login(username, password)
        app.router.push(app.settings.landing_path)
        return session

    session = run_with_console(ctx, _login)
    name = session.profile.display_name if session.profile else username
    console.print(f"[green]✓ Logged in as {name}[/green]")


@main.command()
@click.pass_context
def logout(ctx):
    """End the session and forget the stored token."""

    async def _logout(app: Console):
        await app.session.logout()
        app.router.push(app.settings.login_path)

    run_with_console(ctx, _logout)
    console.print("[green]✓ Logged out[/green]")


@main.command()
@click.pass_context
def whoami(ctx):
    """Show the signed-in operator."""

    async def _whoami(app: Console):
        if not app.session.is_logged_in:
            return None
        return await app.session.fetch_profile()

    profile = run_with_console(ctx, _whoami)
    if profile is None:
        console.print("[yellow]Not logged in[/yellow]")
        sys.exit(1)

    table = Table(title="Current Operator")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("ID", str(profile.id))
    table.add_row("Username", profile.username)
    table.add_row("Nickname", profile.nickname or "-")
    table.add_row("Email", profile.email or "-")
    table.add_row("Roles", ", ".join(role.name for role in profile.roles) or "-")
    table.add_row("Last Login", profile.last_login_time or "-")
    console.print(table)


@main.command()
@click.option("--old-password", prompt=True, hide_input=True)
@click.option("--new-password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_context
def passwd(ctx, old_password: str, new_password: str):
    """Change the operator password."""
    run_with_console(ctx, lambda app: app.auth.change_password(old_password, new_password))
    console.print("[green]✓ Password changed[/green]")


@main.command(name="open")
@click.argument("path")
@click.pass_context
def open_view(ctx, path: str):
    """Navigate to a console view, applying the login guard."""

    async def _open(app: Console):
        return app.router.push(path)

    route = run_with_console(ctx, _open)
    if route.path != "/" + path.strip("/"):
        console.print(f"[yellow]Redirected to {route.path}[/yellow]")
    console.print(f"[bold]{route.title}[/bold] ({route.path})")


@main.command()
def config():
    """Display current configuration."""
    print_configuration_summary()

    problems = validate_required_settings()
    if problems:
        console.print("[red]Configuration Error:[/red]")
        for item in problems:
            console.print(f"  • {item}")
        sys.exit(1)


if __name__ == "__main__":
    main()
