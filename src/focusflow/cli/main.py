"""
Focus Flow CLI — `focusflow` command.

Commands:
  focusflow timer start         Run a countdown in the terminal
  focusflow tasks <cmd>         Task list
  focusflow sessions <cmd>      Local and remote session log
  focusflow stats               Streak, today and weekly totals
  focusflow sync                Replay sessions queued while offline
  focusflow health              Probe the remote session store
  focusflow config <cmd>        Show or change settings
"""

import asyncio
import json
import logging
import os
from pathlib import Path

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install focusflow[cli]")

from focusflow.client import STORE_FILENAME, AsyncFocusFlow
from focusflow.store import JsonFileStore, LocalStore
from focusflow.transport.http import DEFAULT_BASE_URL

console = Console()


def _home() -> Path:
    return Path(os.environ.get("FOCUSFLOW_HOME") or Path.home() / ".focusflow")


def _config_file() -> Path:
    return _home() / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(_config_file().read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    path = _config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))


def _get_client() -> AsyncFocusFlow:
    cfg = _load_config()
    return AsyncFocusFlow(
        base_url=os.environ.get("FOCUSFLOW_BASE_URL") or cfg.get("base_url", DEFAULT_BASE_URL),
        data_dir=_home(),
        sync_interval=float(cfg.get("sync_interval", 30.0)),
        timezone=cfg.get("timezone"),
        week_start=cfg.get("week_start"),
    )


def _get_store() -> LocalStore:
    """Local data only; for commands that never touch the network."""
    return LocalStore(JsonFileStore(_home() / STORE_FILENAME))


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log sync and network activity.")
def main(verbose: bool):
    """Focus Flow CLI — your anti-procrastination companion."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# Register subcommands from separate modules
from focusflow.cli.config import config
from focusflow.cli.sessions import health_cmd, sessions, stats_cmd, sync_cmd
from focusflow.cli.tasks import tasks
from focusflow.cli.timer import timer

main.add_command(config)
main.add_command(sessions)
main.add_command(stats_cmd)
main.add_command(sync_cmd)
main.add_command(health_cmd)
main.add_command(tasks)
main.add_command(timer)


if __name__ == "__main__":
    main()
