from focusflow.models.preferences import Preferences
from focusflow.models.quote import DEFAULT_QUOTE, Quote
from focusflow.models.session import Session, SessionMode, SessionStatus
from focusflow.models.stats import AggregateStats, DailyTotal, HealthStatus, RemoteStats, WeeklyReport
from focusflow.models.task import Task, TaskStatus

__all__ = [
    "AggregateStats",
    "DailyTotal",
    "DEFAULT_QUOTE",
    "HealthStatus",
    "Preferences",
    "Quote",
    "RemoteStats",
    "Session",
    "SessionMode",
    "SessionStatus",
    "Task",
    "TaskStatus",
    "WeeklyReport",
]
