import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from lms_dashboard.core.config import NON_REQUIRED_SUBMISSION_TYPES
from lms_dashboard.schemas.analytics import AssignmentDetail, StudentAnalytics
from lms_dashboard.schemas.canvas import CanvasAssignment, CanvasSubmission, CanvasUser
from lms_dashboard.services.canvas import (
    CanvasClient,
    fetch_assignments,
    fetch_students,
    fetch_submissions,
)

logger = logging.getLogger(__name__)

INCOMPLETE_GRADE = "incomplete"


class SubmissionStatus(str, Enum):
    INCOMPLETE = "incomplete"
    MISSING = "missing"
    LATE = "late"
    ON_TIME = "on_time"


def _as_utc(dt: datetime) -> datetime:
    # naive timestamps are treated as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def effective_due_date(
    submission: CanvasSubmission, assignment: CanvasAssignment
) -> Optional[datetime]:
    return submission.cached_due_date or assignment.due_at


def requires_submission(assignment: CanvasAssignment) -> bool:
    return NON_REQUIRED_SUBMISSION_TYPES.isdisjoint(assignment.submission_types)


def classify_submission(
    submission: CanvasSubmission,
    assignment: CanvasAssignment,
    now: datetime,
) -> Optional[SubmissionStatus]:
    """
    Put a submission into at most one status bucket.

    Returns None when the submission does not count: no due date, an
    assignment that takes no hand-in, or a state none of the rules cover
    (e.g. not submitted yet but not past due either).

    Rules are checked in order and the first match wins:
    - incomplete: pending review, or graded "incomplete"
    - missing: Canvas missing flag
    - late: Canvas late flag
    - missing: past due, never submitted, still "unsubmitted"
    - on time: submitted
    """
    due = effective_due_date(submission, assignment)
    if due is None:
        return None

    if not requires_submission(assignment):
        return None

    if (
        submission.workflow_state == "pending_review"
        or submission.grade == INCOMPLETE_GRADE
        or submission.entered_grade == INCOMPLETE_GRADE
    ):
        return SubmissionStatus.INCOMPLETE

    if submission.missing:
        return SubmissionStatus.MISSING

    if submission.late:
        return SubmissionStatus.LATE

    if (
        submission.submitted_at is None
        and _as_utc(due) < _as_utc(now)
        and submission.workflow_state == "unsubmitted"
    ):
        return SubmissionStatus.MISSING

    if submission.submitted_at is not None:
        return SubmissionStatus.ON_TIME

    return None


def index_assignments(
    assignments: Iterable[CanvasAssignment],
) -> dict[int, CanvasAssignment]:
    # first assignment with a given id wins
    by_id: dict[int, CanvasAssignment] = {}
    for a in assignments:
        by_id.setdefault(a.id, a)
    return by_id


def summarize_student(
    student: CanvasUser,
    assignments_by_id: dict[int, CanvasAssignment],
    submissions: Iterable[CanvasSubmission],
    now: datetime,
) -> StudentAnalytics:
    """Classify one student's submissions into counts and drill-down lists."""
    buckets: dict[SubmissionStatus, list[AssignmentDetail]] = {
        SubmissionStatus.INCOMPLETE: [],
        SubmissionStatus.MISSING: [],
        SubmissionStatus.LATE: [],
    }
    on_time = 0

    for submission in submissions:
        assignment = assignments_by_id.get(submission.assignment_id)
        if assignment is None:
            continue

        status_val = classify_submission(submission, assignment, now)
        if status_val is None:
            continue
        if status_val is SubmissionStatus.ON_TIME:
            on_time += 1
            continue

        keep_submitted_at = status_val in (
            SubmissionStatus.INCOMPLETE,
            SubmissionStatus.LATE,
        )
        buckets[status_val].append(
            AssignmentDetail(
                name=assignment.name,
                due_date=effective_due_date(submission, assignment),
                submitted_at=submission.submitted_at if keep_submitted_at else None,
                comments=submission.submission_comments,
                assignment_id=assignment.id,
                submission_id=submission.id,
            )
        )

    missing_list = buckets[SubmissionStatus.MISSING]
    late_list = buckets[SubmissionStatus.LATE]
    incomplete_list = buckets[SubmissionStatus.INCOMPLETE]

    return StudentAnalytics(
        id=student.id,
        name=student.name,
        sortable_name=student.sortable_name,
        missing=len(missing_list),
        late=len(late_list),
        on_time=on_time,
        incomplete=len(incomplete_list),
        total=len(missing_list) + len(late_list) + on_time + len(incomplete_list),
        missing_list=missing_list,
        late_list=late_list,
        incomplete_list=incomplete_list,
    )


def degraded_analytics(student: CanvasUser) -> StudentAnalytics:
    return StudentAnalytics(
        id=student.id,
        name=student.name,
        sortable_name=student.sortable_name,
        error=True,
    )


async def _analyze_student(
    client: CanvasClient,
    course_id: int,
    student: CanvasUser,
    assignments_by_id: dict[int, CanvasAssignment],
    now: datetime,
) -> StudentAnalytics:
    submissions = await fetch_submissions(client, course_id, student.id)
    return summarize_student(student, assignments_by_id, submissions, now)


async def _analyze_student_safely(
    client: CanvasClient,
    course_id: int,
    student: CanvasUser,
    assignments_by_id: dict[int, CanvasAssignment],
    now: datetime,
    timeout: Optional[float],
) -> StudentAnalytics:
    try:
        return await asyncio.wait_for(
            _analyze_student(client, course_id, student, assignments_by_id, now),
            timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "Timed out after %ss processing student %s in course %s",
            timeout,
            student.id,
            course_id,
        )
    except Exception:
        logger.warning(
            "Error processing student %s in course %s",
            student.id,
            course_id,
            exc_info=True,
        )
    return degraded_analytics(student)


async def course_analytics(
    client: CanvasClient,
    course_id: int,
    *,
    student_timeout: Optional[float] = None,
    now: Optional[datetime] = None,
) -> list[StudentAnalytics]:
    """
    Build one StudentAnalytics per active student, in roster order.

    Roster and assignment fetch errors propagate. Each student is fetched
    and classified in its own task; a failure or timeout there yields a
    degraded record for that student only.
    """
    students = await fetch_students(client, course_id)
    assignments = await fetch_assignments(client, course_id)

    now = now or datetime.now(timezone.utc)
    assignments_by_id = index_assignments(assignments)

    logger.info(
        "Computing analytics for course %s: %d students, %d assignments",
        course_id,
        len(students),
        len(assignments),
    )

    results = await asyncio.gather(
        *(
            _analyze_student_safely(
                client, course_id, student, assignments_by_id, now, student_timeout
            )
            for student in students
        )
    )
    return list(results)
