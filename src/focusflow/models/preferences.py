"""
User preferences persisted next to the session log.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Preferences(BaseModel):
    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    theme: str = "default"
    ambient_sound: str = "none"
    volume: int = Field(default=50, ge=0, le=100)
    label: Optional[str] = None
    label_icon: Optional[str] = None
    week_start: int = Field(default=0, ge=0, le=6)  # 0 = Monday, 6 = Sunday
