"""
Integration tests against a running Focus Flow backend.

Requires environment variables:
  FOCUSFLOW_BASE_URL  — (optional) defaults to http://localhost:3000

Run: FOCUSFLOW_INTEGRATION=1 pytest tests/integration/ -v
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from focusflow import SessionsAPI
from focusflow.errors import RemoteWriteFailed, ValidationFailed
from focusflow.models.session import Session, SessionMode
from focusflow.transport.http import DEFAULT_BASE_URL, HttpClient

SKIP = not os.environ.get("FOCUSFLOW_INTEGRATION")
BASE_URL = os.environ.get("FOCUSFLOW_BASE_URL", DEFAULT_BASE_URL)

pytestmark = pytest.mark.skipif(SKIP, reason="FOCUSFLOW_INTEGRATION not set")


@pytest_asyncio.fixture
async def api():
    http = HttpClient(base_url=BASE_URL)
    yield SessionsAPI(http)
    await http.close()


def _session() -> Session:
    start = datetime.now(timezone.utc) - timedelta(minutes=25)
    return Session(
        mode=SessionMode.FOCUS,
        label="integration",
        duration_minutes=25,
        start_time=start,
        end_time=start + timedelta(minutes=25),
    )


class TestHealth:
    @pytest.mark.asyncio
    async def test_database_connected(self, api):
        health = await api.health()
        assert health.connected


class TestSessionCRUD:
    @pytest.mark.asyncio
    async def test_create_list_get_delete(self, api):
        created = await api.create(_session())
        assert created.id

        listed = await api.list(limit=50)
        assert created.id in [s.id for s in listed]

        fetched = await api.get(created.id)
        assert fetched.duration_minutes == 25

        await api.delete(created.id)
        with pytest.raises(RemoteWriteFailed):
            await api.delete(created.id)

    @pytest.mark.asyncio
    async def test_missing_duration_rejected(self, api):
        with pytest.raises(ValidationFailed):
            await api._http.post("/sessions", {"mode": "focus"})


class TestReadEndpoints:
    @pytest.mark.asyncio
    async def test_stats(self, api):
        stats = await api.stats()
        assert stats.streak >= 0

    @pytest.mark.asyncio
    async def test_weekly(self, api):
        report = await api.weekly()
        assert report is not None

    @pytest.mark.asyncio
    async def test_quote(self, api):
        quote = await api.quote()
        assert quote.text
