"""CLI: focusflow timer start"""

import asyncio
from typing import Optional

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn

from focusflow.dashboard import format_clock
from focusflow.errors import TimerStateError
from focusflow.models.session import Session, SessionMode
from focusflow.timer import TimerSnapshot

console = Console()


def _get_client():
    from focusflow.cli.main import _get_client
    return _get_client()


def _run(coro):
    from focusflow.cli.main import _run
    return _run(coro)


@click.group()
def timer():
    """Countdown timer."""


@timer.command("start")
@click.option("-m", "--mode", type=click.Choice([m.value for m in SessionMode]), default="focus")
@click.option("--minutes", type=click.IntRange(min=1), default=None, help="Override the mode's duration.")
@click.option("-t", "--task", "task_id", default=None, help="Focus on a task (uses its duration).")
@click.option("-l", "--label", default=None, help="Label recorded with the session.")
def timer_start(mode: str, minutes: Optional[int], task_id: Optional[str], label: Optional[str]):
    """Run a countdown; Ctrl+C ends it early and records what elapsed."""

    async def _countdown():
        client = _get_client()
        await client.startup()
        try:
            if task_id:
                task = client.focus_on_task(task_id)
                console.print(f"[dim]Task: {task.title}[/dim]")
            else:
                client.set_mode(SessionMode(mode), minutes)
            if label:
                client.set_label(label)

            session = await _watch(client)
        finally:
            await client.shutdown()
        _print_summary(client, session)

    try:
        _run(_countdown())
    except KeyError:
        console.print(f"[red]No task {task_id}.[/red]")
        raise SystemExit(1)


async def _watch(client) -> Optional[Session]:
    snap = client.snapshot()
    with Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TextColumn("{task.fields[clock]}"),
        console=console,
    ) as progress:
        bar = progress.add_task(snap.mode.value, total=snap.duration_seconds, clock=format_clock(snap.remaining_seconds))

        def on_tick(s: TimerSnapshot) -> None:
            progress.update(bar, completed=s.elapsed_seconds, clock=format_clock(s.remaining_seconds))

        client.set_on_tick(on_tick)
        client.start_timer()
        try:
            return await client.wait_for_session()
        except (KeyboardInterrupt, asyncio.CancelledError):
            try:
                return await client.skip()
            except TimerStateError:
                return None


def _print_summary(client, session: Optional[Session]) -> None:
    if session is None:
        console.print("[yellow]Stopped before any time elapsed; nothing recorded.[/yellow]")
        return
    verb = "focused" if session.is_focus else "rested"
    console.print(f"[green]You {verb} for {session.duration_minutes} minutes.[/green]")
    console.print(f'[italic]"{session.motivational_message}"[/italic] — {session.message_author}')
    if not client.sync.backend_available:
        console.print("[dim]Saved locally; will sync when the backend is back.[/dim]")
