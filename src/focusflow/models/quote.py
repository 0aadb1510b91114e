"""
Motivational quote — wire shape is zenquotes' `{q, a}`.
"""

from pydantic import BaseModel, Field


class Quote(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}

    text: str = Field(alias="q")
    author: str = Field(default="Unknown", alias="a")


DEFAULT_QUOTE = Quote(text="The secret of getting ahead is getting started.", author="Mark Twain")
