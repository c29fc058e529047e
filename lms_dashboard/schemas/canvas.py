"""
Upstream Canvas records, trimmed to the fields the dashboard reads.

Unknown keys in the API payloads are ignored.
"""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class CanvasCourse(BaseModel):
    id: int
    name: str | None = None
    course_code: str | None = None
    total_students: int | None = None
    access_restricted_by_date: bool = False


class CanvasUser(BaseModel):
    id: int
    name: str | None = None
    sortable_name: str | None = None


class CanvasAssignment(BaseModel):
    id: int
    name: str | None = None
    due_at: datetime | None = None
    submission_types: list[str] = Field(default_factory=list)

    @field_validator("submission_types", mode="before")
    @classmethod
    def _null_types(cls, v):
        return [] if v is None else v


class CanvasSubmission(BaseModel):
    id: int | None = None
    assignment_id: int
    user_id: int | None = None
    workflow_state: str | None = None

    # letter grades, "complete"/"incomplete", or points
    grade: str | float | None = None
    entered_grade: str | float | None = None

    submitted_at: datetime | None = None
    # per-student override of the assignment due date
    cached_due_date: datetime | None = None

    missing: bool = False
    late: bool = False
    submission_comments: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("missing", "late", mode="before")
    @classmethod
    def _null_flags(cls, v):
        return False if v is None else v

    @field_validator("submission_comments", mode="before")
    @classmethod
    def _null_comments(cls, v):
        return [] if v is None else v
