"""
CLI commands for browsing scheduler resources.

Lists task groups, tasks, run instances and executors, shows run
statistics, and triggers a task on demand.
"""

from typing import Optional

import click
from rich.table import Table

from app.cli_commands.common import console, run_with_console, status_label
from app.console import Console
from app.core.models import (
    ExecutorListParams,
    GroupListParams,
    InstanceListParams,
    TaskListParams,
)

INSTANCE_STATUS = {
    0: "pending",
    1: "running",
    2: "success",
    3: "failed",
    4: "cancelled",
}


def _page_caption(page) -> str:
    return f"page {page.page} · {len(page.items)} of {page.total}"


@click.command()
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--page-size", default=10, show_default=True, help="Rows per page")
@click.option("--keyword", help="Filter by name")
@click.pass_context
def groups(ctx, page: int, page_size: int, keyword: Optional[str]):
    """List task groups."""
    params = GroupListParams(page=page, page_size=page_size, keyword=keyword)
    result = run_with_console(ctx, lambda app: app.groups.list(params))

    table = Table(title="Task Groups", caption=_page_caption(result))
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("App", style="white")
    table.add_column("Status")
    table.add_column("Description", style="dim")
    for group in result.items:
        table.add_row(
            str(group.id), group.name, group.app_name, status_label(group.status), group.description
        )
    console.print(table)


@click.command()
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--page-size", default=10, show_default=True, help="Rows per page")
@click.option("--group-id", type=int, help="Only tasks of this group")
@click.option("--keyword", help="Filter by name")
@click.option("--status", type=int, help="Filter by status (1 enabled, 0 disabled)")
@click.pass_context
def tasks(
    ctx,
    page: int,
    page_size: int,
    group_id: Optional[int],
    keyword: Optional[str],
    status: Optional[int],
):
    """List scheduled tasks."""
    params = TaskListParams(
        page=page, page_size=page_size, group_id=group_id, keyword=keyword, status=status
    )
    result = run_with_console(ctx, lambda app: app.tasks.list(params))

    table = Table(title="Tasks", caption=_page_caption(result))
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Cron", style="magenta")
    table.add_column("Handler", style="white")
    table.add_column("Status")
    table.add_column("Next Trigger", style="dim")
    for task in result.items:
        table.add_row(
            str(task.id),
            task.name,
            task.cron,
            task.executor_handler,
            status_label(task.status),
            task.next_trigger_time or "-",
        )
    console.print(table)


@click.command()
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--page-size", default=10, show_default=True, help="Rows per page")
@click.option("--task-id", type=int, help="Only runs of this task")
@click.option("--status", type=int, help="Filter by run status")
@click.pass_context
def instances(
    ctx, page: int, page_size: int, task_id: Optional[int], status: Optional[int]
):
    """List task run instances."""
    params = InstanceListParams(page=page, page_size=page_size, task_id=task_id, status=status)
    result = run_with_console(ctx, lambda app: app.instances.list(params))

    table = Table(title="Run History", caption=_page_caption(result))
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Task", style="white", justify="right")
    table.add_column("Executor", style="white")
    table.add_column("Trigger", style="white")
    table.add_column("Status")
    table.add_column("Started", style="dim")
    for instance in result.items:
        table.add_row(
            str(instance.id),
            str(instance.task_id),
            instance.executor_address or "-",
            instance.trigger_type or "-",
            INSTANCE_STATUS.get(instance.status, str(instance.status)),
            instance.start_time or "-",
        )
    console.print(table)


@click.command()
@click.option("--page", default=1, show_default=True, help="Page number")
@click.option("--page-size", default=10, show_default=True, help="Rows per page")
@click.option("--group-id", type=int, help="Only executors of this group")
@click.pass_context
def executors(ctx, page: int, page_size: int, group_id: Optional[int]):
    """List registered executor nodes."""
    params = ExecutorListParams(page=page, page_size=page_size, group_id=group_id)
    result = run_with_console(ctx, lambda app: app.executors.list(params))

    table = Table(title="Executors", caption=_page_caption(result))
    table.add_column("ID", style="cyan")
    table.add_column("App", style="white")
    table.add_column("Address", style="white")
    table.add_column("Load", justify="right")
    table.add_column("CPU %", justify="right")
    table.add_column("Mem %", justify="right")
    table.add_column("Heartbeat", style="dim")
    for node in result.items:
        table.add_row(
            node.id,
            node.app_name,
            f"{node.host}:{node.port}",
            f"{node.current_load}/{node.max_concurrent}",
            f"{node.cpu_usage:.1f}",
            f"{node.memory_usage:.1f}",
            node.last_heartbeat or "-",
        )
    console.print(table)


@click.command()
@click.option("--task-id", type=int, help="Only runs of this task")
@click.pass_context
def stats(ctx, task_id: Optional[int]):
    """Show run statistics."""
    result = run_with_console(ctx, lambda app: app.instances.statistics(task_id=task_id))

    table = Table(title="Run Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(result.total))
    table.add_row("Success", str(result.success))
    table.add_row("Failed", str(result.failed))
    table.add_row("Running", str(result.running))
    table.add_row("Pending", str(result.pending))
    table.add_row("Cancelled", str(result.cancelled))
    table.add_row("Success Rate", f"{result.rate:.1f}%")
    console.print(table)


@click.command()
@click.argument("task_id", type=int)
@click.option("--param", help="Executor parameter for this run")
@click.pass_context
def trigger(ctx, task_id: int, param: Optional[str]):
    """Trigger a task run now.

    TASK_ID: Task to run
    """

    async def _trigger(app: Console):
        await app.tasks.trigger(task_id, param)

    run_with_console(ctx, _trigger)
    console.print(f"[green]✓ Task {task_id} triggered[/green]")
