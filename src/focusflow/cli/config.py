"""CLI: focusflow config show|set|unset"""

import click
from rich.console import Console
from rich.table import Table

console = Console()

KEYS = {
    "base_url": str,
    "sync_interval": float,
    "timezone": str,
    "week_start": int,
}


def _load_config() -> dict:
    from focusflow.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from focusflow.cli.main import _save_config
    _save_config(cfg)


@click.group()
def config():
    """Settings stored in ~/.focusflow/config.json."""


@config.command("show")
def config_show():
    """Show current settings."""
    cfg = _load_config()
    if not cfg:
        console.print("[yellow]No settings saved; using defaults.[/yellow]")
        return
    table = Table(title="Settings")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in sorted(cfg.items()):
        table.add_row(key, str(value))
    console.print(table)


@config.command("set")
@click.argument("key", type=click.Choice(sorted(KEYS)))
@click.argument("value")
def config_set(key: str, value: str):
    """Change one setting."""
    try:
        parsed = KEYS[key](value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a valid {KEYS[key].__name__}", param_hint="value")
    if key == "week_start" and not 0 <= parsed <= 6:
        raise click.BadParameter("week_start must be 0 (Monday) to 6 (Sunday)", param_hint="value")
    _save_config({**_load_config(), key: parsed})
    console.print(f"[green]{key} = {parsed}[/green]")


@config.command("unset")
@click.argument("key", type=click.Choice(sorted(KEYS)))
def config_unset(key: str):
    """Revert one setting to its default."""
    cfg = _load_config()
    cfg.pop(key, None)
    _save_config(cfg)
    console.print(f"[green]{key} reset to default.[/green]")
