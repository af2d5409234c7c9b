"""Pydantic schemas for projects and tasks.

Separate schemas for create/update/read keep the API clean:
- *Create: what you POST
- *Update: what you PUT (all optional; omitted or null = unchanged)
- *Read:   what the API returns (TaskRead adds the computed is_finished)
"""

import re
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, StrictBool, computed_field, field_validator

from tasktrack.services.project_service import is_task_finished


# ─── Tasks ───────────────────────────────────────────────

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_iso_date(value: object) -> Optional[date]:
    # Only "YYYY-MM-DD" strings; numbers and timestamps are rejected.
    if value is None:
        return None
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValueError("finish_date must be a date string in YYYY-MM-DD format")
    return date.fromisoformat(value)


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    finish_date: Optional[date] = Field(None, description="Due date, YYYY-MM-DD")

    @field_validator("finish_date", mode="before")
    @classmethod
    def _iso_finish_date(cls, value: object) -> Optional[date]:
        return _parse_iso_date(value)


class TaskUpdate(BaseModel):
    """Partial update: only non-None fields are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    finish_date: Optional[date] = None

    @field_validator("finish_date", mode="before")
    @classmethod
    def _iso_finish_date(cls, value: object) -> Optional[date]:
        return _parse_iso_date(value)


class TaskToggle(BaseModel):
    is_completed: StrictBool


class TaskRead(BaseModel):
    id: int
    project_id: int
    title: str
    description: Optional[str]
    is_completed: bool
    finish_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("finish_date", "created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite returns naive datetimes; they are UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @computed_field
    @property
    def is_finished(self) -> bool:
        """Past its finish date, and therefore read-only."""
        return is_task_finished(self.finish_date)


# ─── Projects ────────────────────────────────────────────

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    """Partial update: only non-None fields are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectRead(BaseModel):
    id: int
    user_id: int
    name: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ProjectWithTasks(ProjectRead):
    """Project with its full task list."""
    tasks: list[TaskRead] = []
