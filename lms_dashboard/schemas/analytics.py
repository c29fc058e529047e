from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class AssignmentDetail(BaseModel):
    name: Optional[str] = None
    due_date: datetime = Field(alias="dueDate")
    submitted_at: Optional[datetime] = Field(default=None, alias="submittedAt")
    comments: list[dict[str, Any]] = Field(default_factory=list)
    assignment_id: int = Field(alias="assignmentId")
    submission_id: Optional[int] = Field(default=None, alias="submissionId")

    class Config:
        populate_by_name = True


class StudentAnalytics(BaseModel):
    id: int
    name: Optional[str] = None
    sortable_name: Optional[str] = None

    missing: int = 0
    late: int = 0
    on_time: int = Field(default=0, alias="onTime")
    incomplete: int = 0
    total: int = 0

    missing_list: list[AssignmentDetail] = Field(default_factory=list, alias="missingList")
    late_list: list[AssignmentDetail] = Field(default_factory=list, alias="lateList")
    incomplete_list: list[AssignmentDetail] = Field(
        default_factory=list, alias="incompleteList"
    )

    # set when this student's data could not be fetched or classified
    error: bool = False

    class Config:
        populate_by_name = True
