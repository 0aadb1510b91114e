"""
Task models — the optional to-do list a focus session can be bound to.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

CATEGORIES = ("Study", "Work", "Personal")


class TaskStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Task(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = Field(min_length=1)
    category: str = "Study"
    status: TaskStatus = TaskStatus.ACTIVE
    duration: int = Field(default=25, gt=0)  # minutes
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED
