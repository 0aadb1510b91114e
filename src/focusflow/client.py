"""
FocusFlow / AsyncFocusFlow — the application controller.

One instance owns one timer, the local store, the remote client and the
sync coordinator. Timer completions are recorded automatically.
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from focusflow.errors import TimerStateError
from focusflow.models.preferences import Preferences
from focusflow.models.session import Session, SessionMode
from focusflow.models.stats import AggregateStats
from focusflow.models.task import Task
from focusflow.quotes import QuoteProvider
from focusflow.recorder import SessionRecorder
from focusflow.sessions import SessionsAPI
from focusflow.stats import StatsService
from focusflow.store import JsonFileStore, LocalStore
from focusflow.sync import DEFAULT_SYNC_INTERVAL_S, SyncCoordinator
from focusflow.tasks import TaskList
from focusflow.timer import Completion, Scheduler, TimerEngine, TimerSnapshot, utc_now
from focusflow.transport.http import DEFAULT_BASE_URL, HttpClient

STORE_FILENAME = "store.json"


class AsyncFocusFlow:
    """Async Focus Flow client (primary)."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        store: Optional[LocalStore] = None,
        data_dir: Optional[Path] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], datetime] = utc_now,
        sync_interval: float = DEFAULT_SYNC_INTERVAL_S,
        timezone: Optional[str] = None,
        week_start: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if store is None:
            store = LocalStore(JsonFileStore(Path(data_dir) / STORE_FILENAME)) if data_dir else LocalStore()
        self.store = store
        self.preferences: Preferences = store.preferences()

        self.http = HttpClient(base_url=base_url, transport=transport)
        self.sessions = SessionsAPI(self.http)
        self.quotes = QuoteProvider(self.sessions)
        self.sync = SyncCoordinator(store, self.sessions, interval=sync_interval)
        self.recorder = SessionRecorder(store, self.sync, self.quotes, timezone=timezone)
        self.tasks = TaskList(store)
        if week_start is None:
            week_start = self.preferences.week_start
        self.stats = StatsService(store, self.sessions, self.sync, week_start=week_start)

        self.timer = TimerEngine(scheduler=scheduler, clock=clock)
        self.timer.set_on_complete(self._on_complete)
        self._current_task: Optional[Task] = None
        self._recordings: set[asyncio.Task[Session]] = set()
        self._last_recording: Optional[asyncio.Task[Session]] = None
        self._session_handlers: list[Callable[[Session], None]] = []

    # ----- Lifecycle -----
    async def startup(self) -> None:
        """Probe the backend, flush anything queued, start the retry loop."""
        await self.sync.on_online()
        self.sync.start()
        self.quotes.refresh_in_background()

    async def shutdown(self) -> None:
        await self.drain()
        await self.sync.stop()
        await self.quotes.stop()
        await self.http.close()

    async def __aenter__(self) -> "AsyncFocusFlow":
        await self.startup()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.shutdown()

    # ----- Timer -----
    @property
    def current_task(self) -> Optional[Task]:
        return self._current_task

    def snapshot(self) -> TimerSnapshot:
        return self.timer.snapshot()

    def set_on_tick(self, fn: Optional[Callable[[TimerSnapshot], None]]) -> None:
        self.timer.set_on_tick(fn)

    def add_session_handler(self, handler: Callable[[Session], None]) -> Callable[[], None]:
        """Called with every recorded session. Returns a cleanup function."""
        self._session_handlers.append(handler)

        def remove() -> None:
            if handler in self._session_handlers:
                self._session_handlers.remove(handler)
        return remove

    def set_mode(self, mode: SessionMode, minutes: Optional[int] = None) -> None:
        self.timer.set_mode(mode, minutes)

    def set_label(self, label: Optional[str], icon: Optional[str] = None) -> None:
        self.preferences = self.preferences.model_copy(update={"label": label, "label_icon": icon})
        self.store.save_preferences(self.preferences)

    def focus_on_task(self, task_id: str) -> Task:
        """Bind the timer to a task: focus mode with the task's duration."""
        task = self.tasks.get(task_id)
        if task is None:
            raise KeyError(task_id)
        self.timer.set_mode(SessionMode.FOCUS, task.duration)
        self._current_task = task
        return task

    def clear_task(self) -> None:
        if self.timer.snapshot().running:
            raise TimerStateError("Cannot change task while the timer is running.")
        self._current_task = None

    def start_timer(self) -> None:
        self.timer.start()

    def pause_timer(self) -> None:
        self.timer.pause()

    def toggle_timer(self) -> None:
        if self.timer.snapshot().running:
            self.timer.pause()
        else:
            self.timer.start()

    def reset_timer(self) -> None:
        self.timer.reset()

    async def skip(self) -> Session:
        """Complete the countdown early and wait for the record."""
        self.timer.skip()
        return await self._last_recording  # type: ignore[misc]

    # ----- Recording -----
    def _on_complete(self, completion: Completion) -> None:
        task = asyncio.get_running_loop().create_task(self._record(completion))
        self._recordings.add(task)
        task.add_done_callback(self._recordings.discard)
        self._last_recording = task

    async def _record(self, completion: Completion) -> Session:
        label = self.preferences.label if self._current_task is None else None
        session = await self.recorder.record(
            completion,
            label=label,
            label_icon=self.preferences.label_icon,
            task=self._current_task,
        )
        for handler in list(self._session_handlers):
            handler(session)
        return session

    async def drain(self) -> None:
        """Wait for in-flight recordings."""
        if self._recordings:
            await asyncio.gather(*list(self._recordings))

    async def wait_for_session(self, timeout: Optional[float] = None) -> Session:
        """Run until the current countdown completes and its record is stored."""
        done: asyncio.Future[Session] = asyncio.get_running_loop().create_future()

        def _resolve(session: Session) -> None:
            if not done.done():
                done.set_result(session)

        remove = self.add_session_handler(_resolve)
        try:
            return await asyncio.wait_for(done, timeout=timeout)
        finally:
            remove()

    # ----- Stats -----
    async def get_stats(self) -> AggregateStats:
        return await self.stats.snapshot()


class FocusFlow:
    """Sync wrapper around AsyncFocusFlow. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = AsyncFocusFlow(**kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def tasks(self) -> TaskList:
        return self._async.tasks

    @property
    def store(self) -> LocalStore:
        return self._async.store

    @property
    def backend_available(self) -> bool:
        return self._async.sync.backend_available

    def startup(self) -> None:
        self._run(self._async.startup())

    def close(self) -> None:
        self._run(self._async.shutdown())
        self._loop.close()

    def run_timer(self, mode: SessionMode = SessionMode.FOCUS, minutes: Optional[int] = None) -> Session:
        """Start a countdown and block until it completes."""
        self._async.set_mode(mode, minutes)

        async def _run_once() -> Session:
            self._async.start_timer()
            return await self._async.wait_for_session()
        return self._run(_run_once())

    def sync_pending(self) -> Any:
        return self._run(self._async.sync.on_online())

    def get_stats(self) -> AggregateStats:
        return self._run(self._async.get_stats())
