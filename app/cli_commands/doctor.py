"""
"Doctor" command: consolidated config and connectivity diagnostics.

Runs a series of checks and prints a concise, friendly report:
 - Config summary and problems
 - Stored session token
 - API reachability and whether the stored token is still accepted
"""

from __future__ import annotations

import click

from app.cli_commands.common import run_with_console
from app.console import Console
from app.core.config import print_configuration_summary, validate_required_settings
from app.core.exceptions import ApiError


@click.command()
@click.pass_context
def doctor(ctx):
    """Run console diagnostics and print a summary report."""
    click.echo("Scheduler Console Doctor")
    click.echo("=" * 40)

    print_configuration_summary()

    problems = validate_required_settings()
    if problems:
        click.echo("\n✗ Configuration problems:")
        for item in problems:
            click.echo(f"  - {item}")
        ctx.exit(1)
    click.echo("\n✓ Configuration valid")

    async def _check(app: Console):
        if not app.session.is_logged_in:
            return None, None
        try:
            return await app.auth.current_user(), None
        except ApiError as e:
            return None, e

    profile, error = run_with_console(ctx, _check)

    if profile is not None:
        click.echo(f"✓ Session valid ({profile.username})")
    elif error is not None:
        click.echo(f"✗ Session check failed: {error}")
        ctx.exit(1)
    else:
        click.echo("- No stored session (run 'login')")
