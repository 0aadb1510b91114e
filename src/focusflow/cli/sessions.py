"""CLI: focusflow sessions list|pending|delete, focusflow stats|sync|health"""

import json
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from focusflow.dashboard import daily_series, format_duration, recent_sessions, weekly_series
from focusflow.errors import FocusFlowError
from focusflow.models.session import Session, SessionMode

console = Console()


def _get_client():
    from focusflow.cli.main import _get_client
    return _get_client()


def _get_store():
    from focusflow.cli.main import _get_store
    return _get_store()


def _run(coro):
    from focusflow.cli.main import _run
    return _run(coro)


def _session_table(title: str, rows: list[Session]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="bold")
    table.add_column("Mode")
    table.add_column("Label")
    table.add_column("Started")
    table.add_column("Minutes", justify="right")
    table.add_column("Status")
    for s in rows:
        started = s.start_time.astimezone().strftime("%b %d %H:%M")
        table.add_row(s.id, s.mode.value, s.label or "", started, str(s.duration_minutes), s.status.value)
    return table


@click.group()
def sessions():
    """Session log."""


@sessions.command("list")
@click.option("--remote", is_flag=True, help="Read from the remote store instead of the local log.")
@click.option("--mode", type=click.Choice([m.value for m in SessionMode]), default=None)
@click.option("--limit", default=10, type=int)
@click.option("--json-output", "--json", is_flag=True)
def sessions_list(remote: bool, mode: Optional[str], limit: int, json_output: bool):
    """List recent sessions, newest first."""

    async def _list():
        client = _get_client()
        try:
            if remote:
                rows = await client.sessions.list(limit=limit, mode=SessionMode(mode) if mode else None)
            else:
                rows = [s for s in client.store.sessions() if mode is None or s.mode.value == mode]
                rows = recent_sessions(rows, limit=limit)
        except FocusFlowError as e:
            console.print(f"[red]Could not read sessions: {e}[/red]")
            raise SystemExit(1)
        finally:
            await client.http.close()
        if json_output:
            click.echo(json.dumps([s.to_wire() for s in rows], indent=2))
            return
        if not rows:
            console.print("[dim]No sessions yet. Start your first focus session![/dim]")
            return
        console.print(_session_table(f"Sessions ({'remote' if remote else 'local'})", rows))

    _run(_list())


@sessions.command("pending")
def sessions_pending():
    """Show sessions waiting to be synced."""
    store = _get_store()
    rows = store.pending()
    if not rows:
        console.print("[green]Nothing pending; everything is synced.[/green]")
        return
    console.print(_session_table(f"Pending sync ({len(rows)})", rows))
    rejected = store.rejected()
    for s in rows:
        if s.client_id in rejected:
            console.print(f"[yellow]{s.id} rejected by server:[/yellow] {rejected[s.client_id]}")
    if rejected:
        console.print("[dim]Rejected sessions are not retried automatically; "
                      "run `focusflow sync --retry-rejected` after fixing the server.[/dim]")


@sessions.command("delete")
@click.argument("session_id")
def sessions_delete(session_id: str):
    """Delete a session from the remote store."""

    async def _delete():
        client = _get_client()
        try:
            with console.status("Deleting..."):
                await client.sessions.delete(session_id)
        except FocusFlowError as e:
            console.print(f"[red]Delete failed: {e}[/red]")
            raise SystemExit(1)
        finally:
            await client.http.close()
        console.print(f"[green]Session {session_id} deleted.[/green]")

    _run(_delete())


@click.command("stats")
@click.option("--json-output", "--json", is_flag=True)
def stats_cmd(json_output: bool):
    """Streak, today's focus and this week at a glance."""

    async def _stats():
        client = _get_client()
        try:
            await client.sync.check_health()
            stats = await client.stats.snapshot()
            daily = await client.stats.daily()
        finally:
            await client.http.close()
        if json_output:
            click.echo(stats.model_dump_json(indent=2))
            return
        console.print(f"[bold]Streak:[/bold] {stats.current_streak_days} day(s)")
        console.print(f"[bold]Today:[/bold] {stats.today_session_count} session(s), "
                      f"{format_duration(stats.today_minutes)}")
        console.print(f"[bold]All time:[/bold] {stats.total_session_count} session(s), "
                      f"{format_duration(stats.total_minutes)}  [dim]({stats.source})[/dim]")
        console.print(f"[bold]Tasks completed:[/bold] {client.tasks.completed_count()}")

        week = weekly_series(stats)
        table = Table(title="This week")
        for label in week.labels:
            table.add_column(label, justify="right")
        table.add_row(*[str(v) for v in week.values])
        console.print(table)

        series = daily_series(daily)
        for label, value in zip(series.labels, series.values):
            width = round(30 * value / series.max_value)
            console.print(f"{label}  [cyan]{'█' * width}[/cyan] {value}m")

    _run(_stats())


@click.command("sync")
@click.option("--retry-rejected", is_flag=True, help="Also resend sessions the server refused before.")
def sync_cmd(retry_rejected: bool):
    """Replay sessions recorded while the backend was unreachable."""

    async def _sync():
        client = _get_client()
        try:
            with console.status("Syncing..."):
                if retry_rejected:
                    report = await client.sync.retry_rejected()
                else:
                    report = await client.sync.on_online()
        finally:
            await client.http.close()
        if not client.sync.backend_available:
            console.print(f"[yellow]Backend unavailable; {report.remaining} session(s) kept locally.[/yellow]")
        elif report.skipped:
            console.print("[green]Nothing to sync.[/green]")
        else:
            console.print(f"[green]Synced {report.sent} session(s).[/green] "
                          f"{report.remaining} pending, {report.failed} failed.")
        if report.held:
            console.print(f"[yellow]{report.held} session(s) refused by the server; "
                          "see `focusflow sessions pending`.[/yellow]")

    _run(_sync())


@click.command("health")
def health_cmd():
    """Probe the remote session store."""

    async def _health():
        client = _get_client()
        try:
            health = await client.sessions.health()
        except FocusFlowError as e:
            console.print(f"[red]Offline:[/red] {e}")
            raise SystemExit(1)
        finally:
            await client.http.close()
        colour = "green" if health.connected else "yellow"
        console.print(f"[{colour}]{health.status or 'unknown'}[/{colour}] "
                      f"database={health.mongodb} at {health.timestamp or datetime.now().isoformat()}")

    _run(_health())
