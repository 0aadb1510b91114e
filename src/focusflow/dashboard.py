"""
Dashboard adapter — shapes aggregated stats into chart series and display strings.
"""

import calendar
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from focusflow.models.session import Session
from focusflow.models.stats import AggregateStats, DailyTotal
from focusflow.models.task import CATEGORIES
from focusflow.stats import chart_max
from focusflow.timer import TimerSnapshot


@dataclass(frozen=True)
class ChartSeries:
    labels: list[str]
    values: list[int]
    max_value: Optional[int] = None


def weekday_labels(week_start: int = 0) -> list[str]:
    names = list(calendar.day_abbr)  # Mon..Sun
    return names[week_start:] + names[:week_start]


def weekly_series(stats: AggregateStats) -> ChartSeries:
    return ChartSeries(labels=weekday_labels(stats.week_start), values=list(stats.per_weekday_minutes))


def category_series(stats: AggregateStats, categories: Optional[Sequence[str]] = None) -> ChartSeries:
    """Fixed category order (task categories by default); missing ones are 0."""
    keys = list(categories) if categories is not None else list(CATEGORIES)
    if categories is None:
        keys += sorted(k for k in stats.per_category_minutes if k not in keys)
    return ChartSeries(labels=keys, values=[stats.per_category_minutes.get(k, 0) for k in keys])


def daily_series(daily: Sequence[DailyTotal]) -> ChartSeries:
    return ChartSeries(
        labels=[d.day.strftime("%a") for d in daily],
        values=[d.minutes for d in daily],
        max_value=chart_max(daily),
    )


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins else f"{hours}h"


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"


def progress(snapshot: TimerSnapshot) -> float:
    if snapshot.duration_seconds <= 0:
        return 0.0
    return snapshot.elapsed_seconds / snapshot.duration_seconds


def greeting(hour: int) -> str:
    if 5 <= hour < 12:
        return "Morning"
    if 12 <= hour < 17:
        return "Afternoon"
    if 17 <= hour < 21:
        return "Evening"
    return "Night"


def recent_sessions(sessions: Iterable[Session], limit: int = 5) -> list[Session]:
    return sorted(sessions, key=lambda s: s.start_time, reverse=True)[:limit]
