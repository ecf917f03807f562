"""CLI: getui push single|list|app"""

from typing import Optional

import click
from rich.console import Console

from getui_push.models.push import (
    AppCondition,
    AppPush,
    ListPush,
    Message,
    Notification,
    NotificationStyle,
    SinglePush,
)

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


def _notification(title: str, text: str, transmission: Optional[str]) -> Notification:
    return Notification(
        style=NotificationStyle(title=title, text=text),
        transmission_type=transmission is not None,
        transmission_content=transmission or "",
    )


def _parse_condition(raw: str) -> AppCondition:
    key, sep, values = raw.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"expected key=v1,v2 but got {raw!r}", param_hint="--condition")
    return AppCondition(key=key, values=[v for v in values.split(",") if v])


def _report(ret, json_output: bool) -> None:
    if json_output:
        _echo_json(ret.model_dump(exclude_none=True))
        return
    console.print(f"[green]{ret.result}[/green] task={ret.taskid or '-'} status={ret.status or '-'} request={ret.request_id or '-'}")


@click.group()
def push():
    """Send notifications."""


@push.command("single")
@click.option("--cid", default=None, help="Client id")
@click.option("--alias", default=None, help="User alias")
@click.option("--title", required=True)
@click.option("--text", required=True)
@click.option("--transmission", default=None, help="Transmission content")
@click.option("--offline/--no-offline", default=True)
@click.option("--json-output", "--json", is_flag=True)
def push_single(cid, alias, title, text, transmission, offline, json_output):
    """Push to one device (by cid) or alias."""
    if not cid and not alias:
        raise click.UsageError("one of --cid or --alias is required")
    body = SinglePush(
        message=Message(is_offline=offline),
        notification=_notification(title, text, transmission),
        cid=cid,
        alias=alias,
    )

    client = _get_client()

    async def _push():
        async with client:
            with console.status("Pushing..."):
                ret = await client.push_to_single(body)
        _report(ret, json_output)

    _run(_push())


@push.command("list")
@click.option("--cid", "cids", multiple=True, help="Client id (repeatable)")
@click.option("--alias", "aliases", multiple=True, help="Alias (repeatable)")
@click.option("--title", required=True)
@click.option("--text", required=True)
@click.option("--transmission", default=None)
@click.option("--json-output", "--json", is_flag=True)
def push_list(cids, aliases, title, text, transmission, json_output):
    """Push one message to a list of devices."""
    if not cids and not aliases:
        raise click.UsageError("at least one --cid or --alias is required")
    body = ListPush(
        notification=_notification(title, text, transmission),
        cid=list(cids) or None,
        alias=list(aliases) or None,
    )

    client = _get_client()

    async def _push():
        async with client:
            with console.status("Saving list body and pushing..."):
                ret = await client.push_to_list(body)
        _report(ret, json_output)

    _run(_push())


@push.command("app")
@click.option("--title", required=True)
@click.option("--text", required=True)
@click.option("--transmission", default=None)
@click.option("--condition", "conditions", multiple=True, help="Filter as key=v1,v2 (repeatable)")
@click.option("--json-output", "--json", is_flag=True)
def push_app(title, text, transmission, conditions, json_output):
    """Push to every device of the app, optionally filtered."""
    body = AppPush(
        notification=_notification(title, text, transmission),
        condition=[_parse_condition(c) for c in conditions] or None,
    )

    client = _get_client()

    async def _push():
        async with client:
            with console.status("Pushing to app..."):
                ret = await client.push_to_app(body)
        _report(ret, json_output)

    _run(_push())
