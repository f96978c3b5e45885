from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class FilterSpecModel(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    status: Literal["all", "active", "inactive", "pending"] = "all"
    search_term: str = ""

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _blank_date(cls, value: object) -> object:
        # Date inputs post "" when cleared.
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ReportCreateModel(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    status: Literal["completed", "processing", "scheduled"] = "scheduled"
    last_generated: str
    size: str = ""
    type: str = "PDF"


class AutoRefreshModel(BaseModel):
    enabled: bool
    interval: Optional[float] = Field(default=None, gt=0)
