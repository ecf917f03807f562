"""CLI: getui auth login|status|token|close"""

import click
from rich.console import Console

from getui_push.config import ENV_VARS

console = Console()


def _get_client():
    from getui_push.cli.main import _get_client
    return _get_client()


def _run(coro):
    from getui_push.cli.main import _run
    return _run(coro)


@click.group()
def auth():
    """Credentials and auth token commands."""


@auth.command("login")
def auth_login():
    """Save application credentials to the config file."""
    from getui_push import config

    cfg = config.read_config_file(config.CONFIG_FILE)
    cfg["app_id"] = click.prompt("App ID", default=cfg.get("app_id"))
    cfg["app_key"] = click.prompt("App key", default=cfg.get("app_key"))
    cfg["master_secret"] = click.prompt("Master secret", hide_input=True)
    config.save_config(cfg)
    console.print(f"[green]Credentials saved for app {cfg['app_id']}[/green]")
    console.print(f"[dim]Saved to {config.CONFIG_FILE}[/dim]")


@auth.command("status")
def auth_status():
    """Show configured credentials (secrets hidden)."""
    from getui_push import config

    cfg = config.read_config_file(config.CONFIG_FILE)
    if cfg.get("app_id"):
        console.print(f"[green]Configured[/green] app {cfg['app_id']} (key {cfg.get('app_key', '?')})")
    else:
        console.print("[yellow]Not configured. Run `getui auth login`.[/yellow]")
    console.print(f"[dim]Environment overrides: {', '.join(ENV_VARS.values())}[/dim]")


@auth.command("token")
def auth_token():
    """Sign for an auth token and print it. The token is left open."""
    client = _get_client()

    async def _token():
        with console.status("Signing..."):
            await client.start()
        token = client.auth_token
        await client.close(close_auth=False)
        click.echo(token)

    _run(_token())


@auth.command("close")
@click.argument("token")
def auth_close(token):
    """Revoke an auth token."""
    client = _get_client()

    async def _close():
        try:
            await client.session.revoke(token)
        finally:
            await client.http.close()
        console.print("[green]Auth token closed.[/green]")

    _run(_close())
