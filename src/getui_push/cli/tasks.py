"""CLI: getui task stop"""

import click
from rich.console import Console

console = Console()


def _get_client():
    from getui_push.cli.main import _get_client
    return _get_client()


def _run(coro):
    from getui_push.cli.main import _run
    return _run(coro)


@click.group()
def task():
    """Push task commands."""


@task.command("stop")
@click.argument("task_id")
def task_stop(task_id):
    """Stop a running list or app push task."""
    client = _get_client()

    async def _stop():
        async with client:
            with console.status("Stopping task..."):
                ret = await client.stop_task(task_id)
        console.print(f"[green]Task {task_id} stopped: {ret.result}[/green]")

    _run(_stop())
