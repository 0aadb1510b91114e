"""
Session models — one record per completed or skipped countdown.

Attributes are snake_case; the wire format (REST body and the local JSON
store) uses camelCase aliases. MongoDB's `_id` is accepted as `id`.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class SessionMode(str, Enum):
    FOCUS = "focus"
    BREAK = "break"
    LONGBREAK = "longbreak"


class SessionStatus(str, Enum):
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


def new_client_id() -> str:
    return uuid.uuid4().hex


class Session(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}

    id: str = ""
    client_id: str = ""  # idempotency key, assigned before the first remote write
    mode: SessionMode = SessionMode.FOCUS
    label: Optional[str] = None
    label_icon: Optional[str] = None
    task_id: Optional[str] = None
    category: Optional[str] = None
    duration_minutes: int = Field(gt=0)
    start_time: datetime
    end_time: datetime
    timezone: str = "UTC"
    motivational_message: str = ""
    message_author: str = ""
    status: SessionStatus = SessionStatus.COMPLETED

    @model_validator(mode="before")
    @classmethod
    def _fill_ids(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        mongo_id = data.pop("_id", None)
        if mongo_id is not None and not data.get("id"):
            data["id"] = str(mongo_id)
        key = "client_id" if "client_id" in data else "clientId"
        if not data.get(key):
            data[key] = new_client_id()
        if not data.get("id"):
            data["id"] = data[key]
        return data

    @model_validator(mode="after")
    def _check_interval(self) -> "Session":
        if self.end_time < self.start_time:
            raise ValueError("endTime must not be earlier than startTime")
        return self

    @property
    def is_focus(self) -> bool:
        return self.mode == SessionMode.FOCUS

    def to_wire(self, include_id: bool = True) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape used by the REST API and local store."""
        exclude = None if include_id else {"id"}
        return self.model_dump(by_alias=True, mode="json", exclude=exclude)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "Session":
        return cls.model_validate(data)
