"""CLI: focusflow tasks add|list|done|delete|demo"""

from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from focusflow.models.task import CATEGORIES
from focusflow.tasks import TaskList

console = Console()


def _task_list() -> TaskList:
    from focusflow.cli.main import _get_store
    return TaskList(_get_store())


@click.group()
def tasks():
    """Task list."""


@tasks.command("add")
@click.argument("title")
@click.option("-c", "--category", type=click.Choice(CATEGORIES), default="Study")
@click.option("-d", "--duration", type=click.IntRange(min=1), default=25, help="Focus minutes for this task.")
def tasks_add(title: str, category: str, duration: int):
    """Add a task."""
    task_list = _task_list()
    try:
        task = task_list.create(title, category=category, duration=duration)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="title")
    console.print(f"[green]Task created: {task.id}[/green]")


@tasks.command("list")
@click.option("-c", "--category", type=click.Choice(("all",) + CATEGORIES), default="all")
def tasks_list(category: Optional[str]):
    """List tasks, newest first."""
    task_list = _task_list()
    rows = task_list.list(category=category)
    if not rows:
        console.print("[dim]No tasks yet. Add your first task![/dim]")
        return
    table = Table(title="Tasks")
    table.add_column("ID", style="bold")
    table.add_column("")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Minutes", justify="right")
    for t in rows:
        table.add_row(t.id, "✓" if t.completed else " ", t.title, t.category, str(t.duration))
    console.print(table)


@tasks.command("done")
@click.argument("task_id")
def tasks_done(task_id: str):
    """Toggle a task between active and completed."""
    task_list = _task_list()
    try:
        task = task_list.toggle(task_id)
    except KeyError:
        console.print(f"[red]No task {task_id}.[/red]")
        raise SystemExit(1)
    console.print(f"[green]{task.title}: {task.status.value}[/green]")


@tasks.command("delete")
@click.argument("task_id")
def tasks_delete(task_id: str):
    """Delete a task."""
    task_list = _task_list()
    if not task_list.delete(task_id):
        console.print(f"[red]No task {task_id}.[/red]")
        raise SystemExit(1)
    console.print("[green]Task deleted.[/green]")


@tasks.command("demo")
def tasks_demo():
    """Seed sample tasks and sessions into an empty store."""
    task_list = _task_list()
    if task_list.seed_demo():
        console.print("[green]Demo data added.[/green]")
    else:
        console.print("[yellow]Store already has tasks; nothing added.[/yellow]")
