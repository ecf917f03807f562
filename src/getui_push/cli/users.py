"""CLI: getui user status|exists"""

import click
from rich.console import Console
from rich.table import Table

console = Console()


def _get_client():
    from getui_push.cli.main import _get_client
    return _get_client()


def _run(coro):
    from getui_push.cli.main import _run
    return _run(coro)


def _echo_json(data):
    from getui_push.cli.main import _echo_json
    _echo_json(data)


@click.group()
def user():
    """Client id lookups."""


@user.command("status")
@click.argument("cid")
@click.option("--json-output", "--json", is_flag=True)
def user_status(cid, json_output):
    """Show online/offline status of a client id."""
    client = _get_client()

    async def _status():
        async with client:
            ret = await client.user_status(cid)
        if json_output:
            _echo_json({**ret.model_dump(exclude_none=True), "last_login": ret.last_login})
            return
        table = Table(title=f"User {cid}")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("result", ret.result)
        table.add_row("status", ret.status or "")
        table.add_row("last login", ret.last_login.isoformat() if ret.last_login else "")
        console.print(table)

    _run(_status())


@user.command("exists")
@click.argument("cid")
def user_exists(cid):
    """Exit 0 if the client id is known to Getui, 1 otherwise."""
    client = _get_client()

    async def _exists():
        async with client:
            return await client.user_exists(cid)

    existed = _run(_exists())
    console.print(f"{cid}: {'[green]exists[/green]' if existed else '[yellow]no such user[/yellow]'}")
    if not existed:
        raise SystemExit(1)
