"""
Getui push CLI — `getui` command.

Commands:
  getui auth login|status|token|close   Credentials and auth token
  getui push single|list|app            Send notifications
  getui task stop <task-id>             Stop a list/app push task
  getui user status|exists <cid>        Look up a client id
"""

import asyncio
import json

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install getui-push[cli]")

from pydantic import ValidationError as ConfigError

from getui_push.client import AsyncGetuiClient
from getui_push.config import load_config
from getui_push.errors import GetuiError

console = Console()


def _get_client() -> AsyncGetuiClient:
    try:
        cfg = load_config()
    except ConfigError:
        console.print("[red]Not configured. Run `getui auth login` or set GETUI_APP_ID / GETUI_APP_KEY / GETUI_MASTER_SECRET.[/red]")
        raise SystemExit(1)
    return AsyncGetuiClient.from_config(cfg)


def _run(coro):
    try:
        return asyncio.run(coro)
    except GetuiError as e:
        console.print(f"[red]{type(e).__name__} ({e.code}): {e}[/red]")
        raise SystemExit(1)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.version_option("0.1.0")
def main():
    """Getui push CLI — send notifications through the Getui REST API."""


# Register subcommands from separate modules
from getui_push.cli.auth import auth
from getui_push.cli.push import push
from getui_push.cli.tasks import task
from getui_push.cli.users import user

main.add_command(auth)
main.add_command(push)
main.add_command(task)
main.add_command(user)


if __name__ == "__main__":
    main()
