"""
Session Recorder — turns a timer completion into an immutable Session.

Local durability first: the record is appended to the local log before any
network call, then handed to the sync coordinator, which absorbs remote
failures by queueing.
"""

import logging
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from focusflow.models.session import Session, SessionStatus
from focusflow.models.task import Task
from focusflow.quotes import QuoteProvider
from focusflow.store import LocalStore
from focusflow.sync import SyncCoordinator
from focusflow.timer import Completion

logger = logging.getLogger(__name__)

LOCALTIME_PATH = Path("/etc/localtime")


def _iana_name(candidate: str) -> Optional[str]:
    name = candidate.lstrip(":")
    if "zoneinfo/" in name:
        name = name.split("zoneinfo/", 1)[1]
        for prefix in ("posix/", "right/"):
            name = name.removeprefix(prefix)
    if name == "UTC" or ("/" in name and not name.startswith((".", "/"))):
        return name
    return None


def local_timezone_name() -> str:
    """IANA name of the local zone, e.g. "Europe/Berlin".

    Read from `TZ`, then from the `/etc/localtime` link target; falls back
    to the abbreviation (e.g. "CEST") when neither names a zone.
    """
    name = _iana_name(os.environ.get("TZ", ""))
    if name is None and LOCALTIME_PATH.is_symlink():
        name = _iana_name(str(LOCALTIME_PATH.resolve()))
    if name:
        return name
    return datetime.now().astimezone().tzname() or "UTC"


def elapsed_minutes(completion: Completion) -> int:
    """Whole minutes actually counted down, never less than one."""
    return max(completion.elapsed_seconds // 60, 1)


class SessionRecorder:
    def __init__(
        self,
        store: LocalStore,
        sync: SyncCoordinator,
        quotes: QuoteProvider,
        timezone: Optional[str] = None,
    ):
        self._store = store
        self._sync = sync
        self._quotes = quotes
        self._timezone = timezone or local_timezone_name()

    def build(
        self,
        completion: Completion,
        label: Optional[str] = None,
        label_icon: Optional[str] = None,
        task: Optional[Task] = None,
    ) -> Session:
        minutes = elapsed_minutes(completion)
        quote = self._quotes.current
        interrupted = completion.skipped and completion.remaining_seconds > 0
        return Session(
            mode=completion.mode,
            label=label or (task.title if task else None),
            label_icon=label_icon,
            task_id=task.id if task else None,
            category=task.category if task else None,
            duration_minutes=minutes,
            start_time=completion.started_at or completion.ended_at - timedelta(minutes=minutes),
            end_time=completion.ended_at,
            timezone=self._timezone,
            motivational_message=quote.text,
            message_author=quote.author,
            status=SessionStatus.INTERRUPTED if interrupted else SessionStatus.COMPLETED,
        )

    async def record(
        self,
        completion: Completion,
        label: Optional[str] = None,
        label_icon: Optional[str] = None,
        task: Optional[Task] = None,
    ) -> Session:
        session = self.build(completion, label=label, label_icon=label_icon, task=task)
        self._store.append_session(session)
        logger.info("Recorded %s session %s (%d min)", session.mode.value, session.client_id, session.duration_minutes)
        stored = await self._sync.persist(session)
        self._quotes.refresh_in_background()
        return stored
