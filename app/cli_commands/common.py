"""
Shared helpers for console CLI commands.
"""

import asyncio
import sys
from typing import Awaitable, Callable, TypeVar

import click
from rich.console import Console as RichConsole

from app.console import Console, build_console
from app.core.config import get_settings
from app.core.exceptions import ApiError, ConfigurationError, ConsoleError
from app.core.notifier import RichNotifier

console = RichConsole()

T = TypeVar("T")


def run_with_console(ctx: click.Context, action: Callable[[Console], Awaitable[T]]) -> T:
    """
    Build a console, run ``action`` on it and close it.

    API failures were already shown to the user by the client, so they only
    turn into a non-zero exit code here.
    """
    obj = ctx.find_root().obj or {}
    settings = obj.get("settings") or get_settings()
    notifier = obj.get("notifier") or RichNotifier(interactive=sys.stdin.isatty())

    async def _run() -> T:
        async with build_console(settings, notifier, transport=obj.get("transport")) as app:
            return await action(app)

    try:
        return asyncio.run(_run())
    except ApiError:
        sys.exit(1)
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        sys.exit(1)
    except ConsoleError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def status_label(status: int) -> str:
    return "[green]enabled[/green]" if status == 1 else "[dim]disabled[/dim]"
