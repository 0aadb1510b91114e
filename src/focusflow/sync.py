"""
Sync Coordinator — best-effort remote durability for recorded sessions.

Sessions that the remote store has not acknowledged live in the pending
queue of the Local Store and are replayed FIFO once the backend reports
healthy. Each session carries a client id; replay is serialised and keyed
by it so an acknowledged entry is never submitted twice.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Optional

from focusflow.errors import FocusFlowError, ValidationFailed
from focusflow.models.session import Session
from focusflow.sessions import SessionsAPI
from focusflow.store import LocalStore

logger = logging.getLogger(__name__)

DEFAULT_SYNC_INTERVAL_S = 30.0


@dataclass
class SyncReport:
    sent: int = 0
    failed: int = 0
    remaining: int = 0
    held: int = 0  # queued but refused by the server
    skipped: bool = False


class SyncCoordinator:
    def __init__(self, store: LocalStore, sessions_api: SessionsAPI, interval: float = DEFAULT_SYNC_INTERVAL_S):
        self._store = store
        self._api = sessions_api
        self._interval = interval
        self._available = False
        self._lock = asyncio.Lock()
        self._acknowledged: set[str] = set()
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def backend_available(self) -> bool:
        return self._available

    @property
    def pending_count(self) -> int:
        return len(self._store.pending())

    async def check_health(self) -> bool:
        """Probe /api/health. Any failure counts as unavailable; never raises."""
        try:
            health = await self._api.health()
        except FocusFlowError as e:
            logger.info("Backend health check failed: %s", e)
            self._available = False
            return False
        self._available = health.connected
        if not self._available:
            logger.info("Backend reachable but database is %s", health.mongodb)
        return self._available

    async def persist(self, session: Session) -> Session:
        """Write one session remotely if possible, else queue it.

        Returns the acknowledged record (with the server id) or the
        unchanged local record when it was queued.
        """
        if not self._available:
            self._store.enqueue(session)
            return session
        try:
            ack = await self._api.create(session)
        except ValidationFailed as e:
            logger.warning("Server rejected session %s: %s", session.client_id, e)
            self._store.enqueue(session)
            self._store.mark_rejected(session.client_id, str(e))
            return session
        except FocusFlowError as e:
            logger.warning("Remote write failed for %s, queued for later: %s", session.client_id, e)
            self._store.enqueue(session)
            self._available = False
            return session
        self._acknowledged.add(session.client_id)
        return session.model_copy(update={"id": ack.id})

    async def sync_pending(self) -> SyncReport:
        """Replay the pending queue FIFO. Safe to call repeatedly and concurrently.

        Entries the server refused are held back until `retry_rejected()`.
        """
        async with self._lock:
            queue = self._store.pending()
            rejected = self._store.rejected()
            replay = [s for s in queue if s.client_id not in rejected]
            held = len(queue) - len(replay)
            if not self._available or not replay:
                return SyncReport(remaining=len(queue), held=held, skipped=True)

            report = SyncReport(held=held)
            for session in replay:
                if session.client_id in self._acknowledged:
                    self._store.remove_pending(session.client_id)
                    continue
                try:
                    await self._api.create(session)
                except ValidationFailed as e:
                    logger.warning("Server rejected queued session %s: %s", session.client_id, e)
                    self._store.mark_rejected(session.client_id, str(e))
                    report.failed += 1
                    report.held += 1
                    continue
                except FocusFlowError as e:
                    logger.info("Sync interrupted, backend unavailable: %s", e)
                    report.failed += 1
                    self._available = False
                    break
                self._acknowledged.add(session.client_id)
                self._store.remove_pending(session.client_id)
                report.sent += 1

            report.remaining = len(self._store.pending())
            if report.sent:
                logger.info("Synced %d session(s), %d still pending", report.sent, report.remaining)
            return report

    async def on_online(self) -> SyncReport:
        """Connectivity came back: re-probe, then replay."""
        if await self.check_health():
            return await self.sync_pending()
        return SyncReport(remaining=self.pending_count, skipped=True)

    async def retry_rejected(self) -> SyncReport:
        """Make entries the server refused eligible again, then replay."""
        self._store.clear_rejected()
        return await self.on_online()

    # ----- Periodic retry -----
    async def run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if not self._available:
                await self.on_online()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run_periodic())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
