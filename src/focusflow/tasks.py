"""
Task list — the to-do items a focus session can be started from.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from focusflow.models.session import Session, SessionMode
from focusflow.models.task import Task, TaskStatus
from focusflow.store import LocalStore


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TaskList:
    def __init__(self, store: LocalStore):
        self._store = store

    def list(self, category: Optional[str] = None) -> list[Task]:
        """Newest first, optionally filtered to one category."""
        tasks = self._store.tasks()
        if category and category != "all":
            tasks = [t for t in tasks if t.category == category]
        return tasks

    def get(self, task_id: str) -> Optional[Task]:
        return next((t for t in self._store.tasks() if t.id == task_id), None)

    def create(self, title: str, category: str = "Study", duration: int = 25) -> Task:
        title = title.strip()
        if not title:
            raise ValueError("Task title must not be empty.")
        task = Task(title=title, category=category, duration=duration, created_at=_now())
        self._store.save_tasks([task] + self._store.tasks())
        return task

    def toggle(self, task_id: str) -> Task:
        tasks = self._store.tasks()
        for i, task in enumerate(tasks):
            if task.id == task_id:
                status = TaskStatus.ACTIVE if task.completed else TaskStatus.COMPLETED
                tasks[i] = task.model_copy(update={"status": status, "updated_at": _now()})
                self._store.save_tasks(tasks)
                return tasks[i]
        raise KeyError(task_id)

    def delete(self, task_id: str) -> bool:
        tasks = self._store.tasks()
        remaining = [t for t in tasks if t.id != task_id]
        self._store.save_tasks(remaining)
        return len(remaining) != len(tasks)

    def completed_count(self) -> int:
        return sum(1 for t in self._store.tasks() if t.completed)

    def seed_demo(self) -> bool:
        """First-run sample data: a few tasks and three past sessions."""
        if self._store.tasks():
            return False
        now = _now()
        tasks = [
            Task(title="Complete project documentation", category="Work", duration=25, created_at=now),
            Task(title="Study Python patterns", category="Study", duration=45, created_at=now),
            Task(title="Morning meditation", category="Personal", status=TaskStatus.COMPLETED,
                 duration=15, created_at=now),
            Task(title="Review pull requests", category="Work", duration=25, created_at=now),
        ]
        self._store.save_tasks(tasks)
        for days_ago, task, message in (
            (1, tasks[0], "Success is not final, failure is not fatal."),
            (2, tasks[1], "The only way to do great work is to love what you do."),
            (3, tasks[2], "Peace comes from within."),
        ):
            start = now - timedelta(days=days_ago)
            self._store.append_session(Session(
                mode=SessionMode.FOCUS,
                label=task.title,
                task_id=task.id,
                category=task.category,
                duration_minutes=task.duration,
                start_time=start,
                end_time=start + timedelta(minutes=task.duration),
                motivational_message=message,
            ))
        return True
