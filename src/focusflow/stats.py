"""
Stats Aggregator — pure functions over the session log.

Dates are calendar dates in the local timezone. None of the functions
assume the log is sorted; only the week/day windows depend on `now`.
Weekday buckets are indexed from `week_start` (0 = Monday ... 6 = Sunday,
the `datetime.weekday()` numbering); labels come from the same value.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from focusflow.errors import NetworkUnavailable, RemoteReadFailed
from focusflow.models.session import Session
from focusflow.models.stats import AggregateStats, DailyTotal, RemoteStats
from focusflow.sessions import SessionsAPI
from focusflow.store import LocalStore
from focusflow.sync import SyncCoordinator

logger = logging.getLogger(__name__)

MONDAY = 0
SUNDAY = 6
CHART_MIN_MAX_MINUTES = 60
REMOTE_FETCH_LIMIT = 1000

_LOCAL_ONLY_FIELDS = ("label", "label_icon", "task_id", "category")


def local_date(moment: datetime) -> date:
    return moment.astimezone().date() if moment.tzinfo else moment.date()


def _today(now: Optional[datetime]) -> date:
    return local_date(now) if now is not None else date.today()


def _focus(sessions: Iterable[Session]) -> list[Session]:
    return [s for s in sessions if s.is_focus]


def week_start_date(today: date, week_start: int = MONDAY) -> date:
    return today - timedelta(days=(today.weekday() - week_start) % 7)


def current_streak(sessions: Iterable[Session], now: Optional[datetime] = None) -> int:
    """Consecutive days with a focus session, ending today or yesterday."""
    dates = sorted({local_date(s.start_time) for s in _focus(sessions)}, reverse=True)
    cursor = _today(now)
    streak = 0
    for day in dates:
        if day > cursor:
            continue
        if day == cursor or day == cursor - timedelta(days=1):
            streak += 1
            cursor = day
        else:
            break
    return streak


def weekly_minutes(
    sessions: Iterable[Session], now: Optional[datetime] = None, week_start: int = MONDAY
) -> list[int]:
    """Focus minutes of the current calendar week, 7 buckets from `week_start`."""
    start = week_start_date(_today(now), week_start)
    end = start + timedelta(days=7)
    buckets = [0] * 7
    for s in _focus(sessions):
        day = local_date(s.start_time)
        if start <= day < end:
            buckets[(day - start).days] += s.duration_minutes
    return buckets


def category_minutes(sessions: Iterable[Session]) -> dict[str, int]:
    """Minutes per task category, or per mode for sessions without a task."""
    totals: dict[str, int] = defaultdict(int)
    for s in sessions:
        totals[s.category or s.mode.value] += s.duration_minutes
    return dict(totals)


def daily_breakdown(sessions: Iterable[Session], now: Optional[datetime] = None, days: int = 7) -> list[DailyTotal]:
    """Trailing `days` days ending today, oldest first."""
    today = _today(now)
    first = today - timedelta(days=days - 1)
    totals = {first + timedelta(days=i): DailyTotal(day=first + timedelta(days=i)) for i in range(days)}
    for s in _focus(sessions):
        bucket = totals.get(local_date(s.start_time))
        if bucket is not None:
            bucket.minutes += s.duration_minutes
            bucket.sessions += 1
    return list(totals.values())


def chart_max(daily: Iterable[DailyTotal]) -> int:
    """Bar chart ceiling; one short session must not fill the chart."""
    return max([d.minutes for d in daily] + [CHART_MIN_MAX_MINUTES])


def today_totals(sessions: Iterable[Session], now: Optional[datetime] = None) -> tuple[int, int]:
    today = _today(now)
    todays = [s for s in _focus(sessions) if local_date(s.start_time) == today]
    return len(todays), sum(s.duration_minutes for s in todays)


def aggregate(
    sessions: Iterable[Session],
    now: Optional[datetime] = None,
    week_start: int = MONDAY,
    source: str = "local",
) -> AggregateStats:
    sessions = list(sessions)
    focus = _focus(sessions)
    today_count, today_mins = today_totals(focus, now)
    return AggregateStats(
        today_session_count=today_count,
        today_minutes=today_mins,
        total_session_count=len(focus),
        total_minutes=sum(s.duration_minutes for s in focus),
        current_streak_days=current_streak(focus, now),
        per_weekday_minutes=weekly_minutes(focus, now, week_start),
        per_category_minutes=category_minutes(sessions),
        week_start=week_start,
        source=source,
    )


def _interval_key(session: Session) -> tuple[datetime, datetime]:
    """Start/end at millisecond precision, the resolution the remote store keeps."""
    def ms(moment: datetime) -> datetime:
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.replace(microsecond=moment.microsecond // 1000 * 1000)
    return ms(session.start_time), ms(session.end_time)


def restore_local_fields(remote: Iterable[Session], local: Iterable[Session]) -> list[Session]:
    """Copy label, task and category back onto remote rows.

    The remote schema does not keep them, so a remote row is matched to the
    local record with the same start and end time.
    """
    by_interval = {_interval_key(s): s for s in local}
    restored = []
    for row in remote:
        match = by_interval.get(_interval_key(row))
        if match is not None:
            missing = {f: getattr(match, f) for f in _LOCAL_ONLY_FIELDS if getattr(row, f) is None}
            if missing:
                row = row.model_copy(update=missing)
        restored.append(row)
    return restored


class StatsService:
    """Computes stats from the remote store when it is reachable, else locally.

    The remote log is read in full: the fetch limit doubles until the server
    returns fewer rows than asked for. Remote rows do not carry label, task
    or category, so those are restored from the local log where the same
    session was recorded on this device; sessions recorded elsewhere are
    grouped by mode in `per_category_minutes`.
    """

    def __init__(
        self,
        store: LocalStore,
        sessions_api: SessionsAPI,
        sync: SyncCoordinator,
        week_start: int = MONDAY,
    ):
        self._store = store
        self._api = sessions_api
        self._sync = sync
        self.week_start = week_start

    async def sessions(self) -> tuple[list[Session], str]:
        """Remote log plus anything still queued, or the local log on failure."""
        if self._sync.backend_available:
            try:
                remote = await self._fetch_all()
            except (RemoteReadFailed, NetworkUnavailable) as e:
                logger.warning("Remote read failed, using local log: %s", e)
            else:
                remote = restore_local_fields(remote, self._store.sessions())
                return remote + self._store.pending(), "remote"
        return self._store.sessions(), "local"

    async def _fetch_all(self) -> list[Session]:
        limit = REMOTE_FETCH_LIMIT
        while True:
            rows = await self._api.list(limit=limit)
            if len(rows) < limit:
                return rows
            logger.debug("Remote log holds at least %d sessions, refetching", limit)
            limit *= 2

    async def snapshot(self, now: Optional[datetime] = None) -> AggregateStats:
        sessions, source = await self.sessions()
        return aggregate(sessions, now=now, week_start=self.week_start, source=source)

    async def daily(self, now: Optional[datetime] = None, days: int = 7) -> list[DailyTotal]:
        sessions, _ = await self.sessions()
        return daily_breakdown(sessions, now=now, days=days)

    async def remote_summary(self) -> RemoteStats:
        """Server-computed /api/stats; raises if the backend cannot be read."""
        return await self._api.stats()
