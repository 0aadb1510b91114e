"""
focusflow — Focus Flow SDK for Python.

Pomodoro countdown, session log, streak and weekly stats, and an
offline-first sync client for the Focus Flow session store.
"""

from focusflow.client import AsyncFocusFlow, FocusFlow
from focusflow.errors import (
    FocusFlowError,
    NetworkUnavailable,
    RemoteReadFailed,
    RemoteWriteFailed,
    StoreError,
    TimerStateError,
    ValidationFailed,
)
from focusflow.models import AggregateStats, Quote, Session, SessionMode, SessionStatus, Task
from focusflow.sessions import SessionsAPI
from focusflow.store import JsonFileStore, LocalStore, MemoryStore
from focusflow.sync import SyncCoordinator
from focusflow.timer import TimerEngine, TimerState

__version__ = "0.1.0"
__all__ = [
    "AsyncFocusFlow",
    "FocusFlow",
    "FocusFlowError",
    "NetworkUnavailable",
    "RemoteReadFailed",
    "RemoteWriteFailed",
    "StoreError",
    "TimerStateError",
    "ValidationFailed",
    "AggregateStats",
    "Quote",
    "Session",
    "SessionMode",
    "SessionStatus",
    "Task",
    "SessionsAPI",
    "JsonFileStore",
    "LocalStore",
    "MemoryStore",
    "SyncCoordinator",
    "TimerEngine",
    "TimerState",
]
