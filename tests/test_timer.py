"""Timer engine tests: state machine, ticks, cancellation and completion."""

import asyncio

import pytest

from focusflow.errors import TimerStateError
from focusflow.models.session import SessionMode
from focusflow.timer import AsyncioScheduler, TimerEngine, TimerState

from conftest import FakeClock, FakeScheduler


@pytest.fixture
def engine(scheduler: FakeScheduler, clock: FakeClock) -> TimerEngine:
    return TimerEngine(scheduler=scheduler, clock=clock)


def test_initial_state(engine: TimerEngine):
    snap = engine.snapshot()
    assert snap.state == TimerState.IDLE
    assert snap.mode == SessionMode.FOCUS
    assert snap.remaining_seconds == snap.duration_seconds == 25 * 60
    assert snap.started_at is None


def test_ticks_decrement_and_notify(engine: TimerEngine, scheduler: FakeScheduler):
    ticks = []
    engine.set_on_tick(lambda s: ticks.append(s.remaining_seconds))
    engine.start()
    scheduler.advance(3)
    assert ticks == [1499, 1498, 1497]
    assert engine.state == TimerState.RUNNING


def test_start_twice_rejected(engine: TimerEngine):
    engine.start()
    with pytest.raises(TimerStateError):
        engine.start()


def test_pause_preserves_remaining_and_stops_ticking(engine: TimerEngine, scheduler: FakeScheduler):
    engine.start()
    scheduler.advance(10)
    engine.pause()
    scheduler.advance(10)
    snap = engine.snapshot()
    assert snap.state == TimerState.PAUSED
    assert snap.remaining_seconds == 1490
    assert scheduler.active == []


def test_pause_when_idle_rejected(engine: TimerEngine):
    with pytest.raises(TimerStateError):
        engine.pause()


def test_resume_keeps_session_start(engine: TimerEngine, scheduler: FakeScheduler, clock: FakeClock):
    started = clock()
    engine.start()
    scheduler.advance(5)
    engine.pause()
    engine.start()
    assert engine.snapshot().started_at == started


def test_reset_returns_to_idle(engine: TimerEngine, scheduler: FakeScheduler):
    engine.start()
    scheduler.advance(30)
    engine.reset()
    snap = engine.snapshot()
    assert snap.state == TimerState.IDLE
    assert snap.remaining_seconds == 1500
    assert snap.started_at is None
    assert scheduler.active == []


def test_set_mode_changes_duration(engine: TimerEngine):
    engine.set_mode(SessionMode.BREAK)
    assert engine.snapshot().remaining_seconds == 5 * 60
    engine.set_mode(SessionMode.LONGBREAK)
    assert engine.snapshot().duration_seconds == 15 * 60
    engine.set_mode(SessionMode.FOCUS, minutes=45)
    assert engine.snapshot().duration_seconds == 45 * 60


def test_set_mode_rejected_while_running(engine: TimerEngine):
    engine.start()
    with pytest.raises(TimerStateError):
        engine.set_mode(SessionMode.BREAK)
    assert engine.mode == SessionMode.FOCUS


def test_completion_fires_exactly_once(engine: TimerEngine, scheduler: FakeScheduler, clock: FakeClock):
    completions = []
    engine.set_on_complete(completions.append)
    engine.set_mode(SessionMode.BREAK)
    started = clock()
    engine.start()
    scheduler.advance(5 * 60 + 30)

    assert len(completions) == 1
    done = completions[0]
    assert done.mode == SessionMode.BREAK
    assert done.remaining_seconds == 0
    assert done.elapsed_seconds == 300
    assert not done.skipped
    assert (done.ended_at - started).total_seconds() == 300
    assert engine.state == TimerState.COMPLETED
    assert engine.snapshot().remaining_seconds == 300
    assert scheduler.active == []


def test_stale_tick_from_cancelled_run_is_ignored(engine: TimerEngine, scheduler: FakeScheduler):
    engine.start()
    stale = scheduler.handles[0]
    engine.pause()
    engine.start()
    stale.callback()  # a tick that slipped past cancellation
    assert engine.snapshot().remaining_seconds == 1500


def test_skip_requires_elapsed_time(engine: TimerEngine, scheduler: FakeScheduler):
    with pytest.raises(TimerStateError):
        engine.skip()
    engine.start()
    scheduler.advance(90)
    engine.pause()
    completion = engine.skip()
    assert completion.skipped
    assert completion.elapsed_seconds == 90
    assert engine.state == TimerState.COMPLETED


def test_start_after_completion_begins_fresh(engine: TimerEngine, scheduler: FakeScheduler, clock: FakeClock):
    engine.set_mode(SessionMode.BREAK, minutes=1)
    engine.start()
    scheduler.advance(60)
    clock.advance(100)
    engine.start()
    assert engine.state == TimerState.RUNNING
    assert engine.snapshot().started_at == clock()


@pytest.mark.asyncio
async def test_asyncio_scheduler_repeats_until_cancelled():
    fired = []
    done = asyncio.Event()

    def callback():
        fired.append(len(fired) + 1)
        if len(fired) == 3:
            done.set()

    handle = AsyncioScheduler().schedule_repeating(0.01, callback)
    await asyncio.wait_for(done.wait(), timeout=1)
    handle.cancel()
    count = len(fired)
    await asyncio.sleep(0.05)
    assert count >= 3
    assert len(fired) == count


@pytest.mark.asyncio
async def test_asyncio_scheduler_cancel_inside_callback():
    fired = []
    handle = None

    def callback():
        fired.append(1)
        handle.cancel()

    handle = AsyncioScheduler().schedule_repeating(0.01, callback)
    await asyncio.sleep(0.08)
    assert fired == [1]


@pytest.mark.asyncio
async def test_engine_on_real_loop_stops_ticking_when_paused(monkeypatch):
    monkeypatch.setattr("focusflow.timer.TICK_SECONDS", 0.01)
    engine = TimerEngine(scheduler=AsyncioScheduler())
    ticked = asyncio.Event()
    ticks = []

    def on_tick(snap):
        ticks.append(snap.remaining_seconds)
        if len(ticks) >= 2:
            ticked.set()

    engine.set_on_tick(on_tick)
    engine.start()
    await asyncio.wait_for(ticked.wait(), timeout=1)
    engine.pause()
    paused_at = engine.snapshot().remaining_seconds
    count = len(ticks)
    await asyncio.sleep(0.05)
    assert engine.snapshot().remaining_seconds == paused_at
    assert len(ticks) == count
    assert engine.state == TimerState.PAUSED


@pytest.mark.asyncio
async def test_engine_on_real_loop_completes_once(monkeypatch):
    monkeypatch.setattr("focusflow.timer.TICK_SECONDS", 0.001)
    engine = TimerEngine(scheduler=AsyncioScheduler())
    engine.set_mode(SessionMode.BREAK, minutes=1)
    done = asyncio.Event()
    completions = []

    def on_complete(completion):
        completions.append(completion)
        done.set()

    engine.set_on_complete(on_complete)
    engine.start()
    await asyncio.wait_for(done.wait(), timeout=5)
    await asyncio.sleep(0.02)
    assert len(completions) == 1
    assert completions[0].remaining_seconds == 0
    assert engine.state == TimerState.COMPLETED
