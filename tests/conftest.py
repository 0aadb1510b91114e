"""Pytest fixtures for Focus Flow tests."""

import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import httpx
import pytest
import pytest_asyncio

from focusflow.client import AsyncFocusFlow
from focusflow.models.session import Session, SessionMode
from focusflow.quotes import QuoteProvider
from focusflow.sessions import SessionsAPI
from focusflow.store import LocalStore, MemoryStore
from focusflow.sync import SyncCoordinator
from focusflow.transport.http import HttpClient

BASE_URL = "http://focusflow.test"


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 10, 14, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class _FakeHandle:
    def __init__(self, interval: float, callback: Callable[[], None], due: float):
        self.interval = interval
        self.callback = callback
        self.due = due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Virtual-time scheduler; advance() fires due callbacks in order."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock
        self.time = 0.0
        self.handles: list[_FakeHandle] = []

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> _FakeHandle:
        handle = _FakeHandle(interval, callback, self.time + interval)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[_FakeHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: int) -> None:
        for _ in range(int(seconds)):
            self.time += 1
            if self.clock is not None:
                self.clock.advance(1)
            for handle in list(self.active):
                if not handle.cancelled and handle.due <= self.time:
                    handle.due += handle.interval
                    handle.callback()


class FakeRemote:
    """In-memory stand-in for the Express/Mongo session store."""

    def __init__(self) -> None:
        self.sessions: dict[str, dict[str, Any]] = {}
        self.posts: list[dict[str, Any]] = []
        self.reachable = True
        self.db_connected = True
        self.fail_writes = False
        self.reject_writes = False
        self.fail_reads = False
        self.quote_available = True
        self.post_reply: Optional[tuple[int, Any]] = None  # (status, json body) for every POST

    def handler(self, request: httpx.Request) -> httpx.Response:
        if not self.reachable:
            raise httpx.ConnectError("connection refused", request=request)
        path = request.url.path.removeprefix("/api")
        method = request.method

        if path == "/health":
            return httpx.Response(200, json={
                "status": "ok",
                "mongodb": "connected" if self.db_connected else "disconnected",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
        if path == "/quote":
            if not self.quote_available:
                return httpx.Response(503, json={"success": False, "error": "upstream down"})
            return httpx.Response(200, json=[{"q": "Stay hungry, stay foolish.", "a": "Steve Jobs"}])
        if path == "/sessions" and method == "GET":
            if self.fail_reads:
                return httpx.Response(500, json={"success": False, "error": "db error"})
            rows = sorted(self.sessions.values(), key=lambda s: s["startTime"], reverse=True)
            mode = request.url.params.get("mode")
            if mode:
                rows = [s for s in rows if s["mode"] == mode]
            rows = rows[: int(request.url.params.get("limit", 50))]
            return httpx.Response(200, json={"success": True, "count": len(rows), "sessions": rows})
        if path == "/sessions" and method == "POST":
            body = json.loads(request.content)
            self.posts.append(body)
            if self.post_reply is not None:
                status, payload = self.post_reply
                return httpx.Response(status, json=payload)
            if self.fail_writes:
                return httpx.Response(500, json={"success": False, "error": "write failed"})
            if self.reject_writes:
                return httpx.Response(400, json={"success": False, "error": "durationMinutes is required"})
            stored = {**body, "_id": uuid.uuid4().hex[:24], "__v": 0}
            for field in ("clientId", "label", "labelIcon", "taskId", "category"):
                stored.pop(field, None)  # not in the mongoose schema
            self.sessions[stored["_id"]] = stored
            return httpx.Response(201, json={"success": True, "session": stored})
        if path.startswith("/sessions/"):
            session_id = path.rsplit("/", 1)[-1]
            if session_id not in self.sessions:
                return httpx.Response(404, json={"success": False, "error": "Session not found"})
            if method == "DELETE":
                del self.sessions[session_id]
                return httpx.Response(200, json={"success": True, "message": "Session deleted"})
            return httpx.Response(200, json={"success": True, "session": self.sessions[session_id]})
        if path == "/stats":
            return httpx.Response(200, json={
                "success": True, "todaySessions": 1, "todayMinutes": 25, "totalSessions": 3,
                "totalMinutes": 75, "streak": 2,
                "weeklyData": [{"_id": 4, "totalMinutes": 25, "count": 1}],
                "categoryData": [{"_id": "focus", "totalMinutes": 75, "count": 3}],
            })
        if path == "/weekly":
            return httpx.Response(200, json={
                "success": True, "weekStart": "2026-10-08", "weekEnd": "2026-10-14",
                "dailyData": [{"_id": "2026-10-14", "totalMinutes": 50, "sessions": 2}],
            })
        if path == "/broken":
            return httpx.Response(200, content=b"<html>", headers={"content-type": "text/html"})
        return httpx.Response(404, json={"success": False, "error": "not found"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_session(
    start: datetime,
    minutes: int = 25,
    mode: SessionMode = SessionMode.FOCUS,
    **kwargs: Any,
) -> Session:
    return Session(
        mode=mode,
        duration_minutes=minutes,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        **kwargs,
    )


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def store() -> LocalStore:
    return LocalStore(MemoryStore())


@pytest_asyncio.fixture
async def api(remote: FakeRemote):
    http = HttpClient(base_url=BASE_URL, transport=remote.transport())
    yield SessionsAPI(http)
    await http.close()


@pytest.fixture
def sync(store: LocalStore, api: SessionsAPI) -> SyncCoordinator:
    return SyncCoordinator(store, api, interval=0.01)


@pytest.fixture
def quotes(api: SessionsAPI) -> QuoteProvider:
    return QuoteProvider(api)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> FakeScheduler:
    return FakeScheduler(clock)


@pytest_asyncio.fixture
async def app(remote: FakeRemote, store: LocalStore, scheduler: FakeScheduler, clock: FakeClock):
    client = AsyncFocusFlow(
        base_url=BASE_URL,
        store=store,
        scheduler=scheduler,
        clock=clock,
        timezone="UTC",
        transport=remote.transport(),
    )
    yield client
    await client.shutdown()
