"""
Statistics models — the locally computed aggregate and the server's
`/api/stats` and `/api/weekly` responses.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class AggregateStats(BaseModel):
    """Pure function of the session log at a given instant; never persisted."""

    today_session_count: int = 0
    today_minutes: int = 0
    total_session_count: int = 0
    total_minutes: int = 0
    current_streak_days: int = 0
    per_weekday_minutes: list[int] = Field(default_factory=lambda: [0] * 7)
    per_category_minutes: dict[str, int] = Field(default_factory=dict)
    week_start: int = 0
    source: str = "local"  # local | remote


class DailyTotal(BaseModel):
    day: date
    minutes: int = 0
    sessions: int = 0


class WeekdayBucket(BaseModel):
    """Mongo `$dayOfWeek` group: 1 = Sunday ... 7 = Saturday."""
    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    day_of_week: int = Field(alias="_id")
    total_minutes: int = 0
    count: int = 0


class CategoryBucket(BaseModel):
    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    mode: str = Field(alias="_id")
    total_minutes: int = 0
    count: int = 0


class RemoteStats(BaseModel):
    """GET /api/stats"""
    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    today_sessions: int = 0
    today_minutes: int = 0
    total_sessions: int = 0
    total_minutes: Optional[int] = None
    streak: int = 0
    weekly_data: list[WeekdayBucket] = Field(default_factory=list)
    category_data: list[CategoryBucket] = Field(default_factory=list)


class DailyBucket(BaseModel):
    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    day: str = Field(alias="_id")  # YYYY-MM-DD
    total_minutes: int = 0
    sessions: int = 0


class WeeklyReport(BaseModel):
    """GET /api/weekly"""
    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    week_start: str = ""
    week_end: str = ""
    daily_data: list[DailyBucket] = Field(default_factory=list)


class HealthStatus(BaseModel):
    """GET /api/health"""
    status: str = ""
    mongodb: str = "disconnected"
    timestamp: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.mongodb == "connected"
