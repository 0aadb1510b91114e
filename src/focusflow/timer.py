"""
Timer Engine — a single countdown bound to a mode.

The engine owns its state; callers mutate it only through start / pause /
reset / set_mode / skip. Ticks come from a Scheduler so tests can drive
virtual time. Every start() bumps a generation counter and ticks carry the
generation they were scheduled with, so a tick from a cancelled run can
never decrement or complete the current one.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

from focusflow.errors import TimerStateError
from focusflow.models.session import SessionMode

TICK_SECONDS = 1.0

MODE_MINUTES = {
    SessionMode.FOCUS: 25,
    SessionMode.BREAK: 5,
    SessionMode.LONGBREAK: 15,
}


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> Handle: ...


class _RepeatingHandle:
    """Re-arms itself against absolute loop time so ticks do not drift."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._deadline = loop.time() + interval
        self._timer = loop.call_at(self._deadline, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._deadline += self._interval
        self._timer = self._loop.call_at(self._deadline, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> Handle:
        loop = self._loop or asyncio.get_running_loop()
        return _RepeatingHandle(loop, interval, callback)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TimerSnapshot:
    mode: SessionMode
    state: TimerState
    duration_seconds: int
    remaining_seconds: int
    started_at: Optional[datetime]

    @property
    def running(self) -> bool:
        return self.state == TimerState.RUNNING

    @property
    def elapsed_seconds(self) -> int:
        return self.duration_seconds - self.remaining_seconds


@dataclass(frozen=True)
class Completion:
    mode: SessionMode
    planned_seconds: int
    remaining_seconds: int
    started_at: Optional[datetime]
    ended_at: datetime
    skipped: bool = False

    @property
    def elapsed_seconds(self) -> int:
        return self.planned_seconds - self.remaining_seconds


class TimerEngine:
    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        mode: SessionMode = SessionMode.FOCUS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock = clock
        self._mode = SessionMode(mode)
        self._duration = MODE_MINUTES[self._mode] * 60
        self._remaining = self._duration
        self._running = False
        self._completed = False
        self._started_at: Optional[datetime] = None
        self._handle: Optional[Handle] = None
        self._generation = 0

        self._on_tick: Optional[Callable[[TimerSnapshot], None]] = None
        self._on_complete: Optional[Callable[[Completion], None]] = None

    # ----- Callbacks -----
    def set_on_tick(self, fn: Optional[Callable[[TimerSnapshot], None]]) -> None:
        self._on_tick = fn

    def set_on_complete(self, fn: Optional[Callable[[Completion], None]]) -> None:
        self._on_complete = fn

    # ----- State -----
    @property
    def mode(self) -> SessionMode:
        return self._mode

    @property
    def state(self) -> TimerState:
        if self._running:
            return TimerState.RUNNING
        if self._completed:
            return TimerState.COMPLETED
        if self._started_at is not None:
            return TimerState.PAUSED
        return TimerState.IDLE

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            mode=self._mode,
            state=self.state,
            duration_seconds=self._duration,
            remaining_seconds=self._remaining,
            started_at=self._started_at,
        )

    # ----- Operations -----
    def start(self) -> None:
        if self._running:
            raise TimerStateError("Timer is already running.")
        self._completed = False
        if self._started_at is None:
            self._started_at = self._clock()
        self._running = True
        self._generation += 1
        generation = self._generation
        self._handle = self._scheduler.schedule_repeating(TICK_SECONDS, lambda: self._tick(generation))

    def pause(self) -> None:
        if not self._running:
            raise TimerStateError("Timer is not running.")
        self._stop_ticking()

    def reset(self) -> None:
        self._stop_ticking()
        self._remaining = self._duration
        self._started_at = None
        self._completed = False

    def set_mode(self, mode: SessionMode, minutes: Optional[int] = None) -> None:
        """Switch mode (and optionally override its duration); only while stopped."""
        if self._running:
            raise TimerStateError("Cannot change mode while the timer is running.")
        if minutes is not None and minutes <= 0:
            raise ValueError("Duration must be a positive number of minutes.")
        self._mode = SessionMode(mode)
        self._duration = (minutes or MODE_MINUTES[self._mode]) * 60
        self.reset()

    def skip(self) -> Completion:
        """Complete early. Allowed while running or once some time has elapsed."""
        if not self._running and self._remaining >= self._duration:
            raise TimerStateError("Nothing to skip: the timer has not started.")
        return self._finish(skipped=True)

    # ----- Internals -----
    def _stop_ticking(self) -> None:
        self._running = False
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self, generation: int) -> None:
        if generation != self._generation or not self._running:
            return
        self._remaining = max(self._remaining - 1, 0)
        if self._on_tick:
            self._on_tick(self.snapshot())
        if self._remaining == 0:
            self._finish(skipped=False)

    def _finish(self, skipped: bool) -> Completion:
        self._stop_ticking()
        completion = Completion(
            mode=self._mode,
            planned_seconds=self._duration,
            remaining_seconds=self._remaining,
            started_at=self._started_at,
            ended_at=self._clock(),
            skipped=skipped,
        )
        self._remaining = self._duration
        self._started_at = None
        self._completed = True
        if self._on_complete:
            self._on_complete(completion)
        return completion
