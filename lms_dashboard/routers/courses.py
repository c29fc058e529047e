import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from lms_dashboard.core.config import Settings, get_settings
from lms_dashboard.core.deps import get_canvas_client
from lms_dashboard.core.permissions import require_instructor
from lms_dashboard.schemas.analytics import StudentAnalytics
from lms_dashboard.schemas.course import CourseRead
from lms_dashboard.services.analytics import course_analytics
from lms_dashboard.services.canvas import CanvasClient, fetch_courses

logger = logging.getLogger(__name__)

router = APIRouter()

# errors that mean the upstream data could not be loaded
UPSTREAM_ERRORS = (httpx.HTTPError, ValidationError)


@router.get(
    "",
    response_model=list[CourseRead],
    responses={
        401: {"description": "Not authenticated"},
        500: {"description": "Failed to fetch courses"},
    },
)
async def list_courses(
    _instructor: str = Depends(require_instructor),
    client: CanvasClient = Depends(get_canvas_client),
):
    try:
        courses = await fetch_courses(client)
    except UPSTREAM_ERRORS as exc:
        logger.error("Error fetching courses: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch courses",
        )

    # drop unnamed courses and ones outside their access dates
    return [
        CourseRead(
            id=c.id,
            name=c.name,
            course_code=c.course_code,
            total_students=c.total_students or 0,
        )
        for c in courses
        if c.name and not c.access_restricted_by_date
    ]


@router.get(
    "/{course_id}/analytics",
    response_model=list[StudentAnalytics],
    responses={
        401: {"description": "Not authenticated"},
        500: {"description": "Failed to fetch student analytics"},
    },
)
async def student_analytics(
    course_id: int,
    _instructor: str = Depends(require_instructor),
    client: CanvasClient = Depends(get_canvas_client),
    settings: Settings = Depends(get_settings),
):
    try:
        return await course_analytics(
            client,
            course_id,
            student_timeout=settings.student_task_timeout,
        )
    except UPSTREAM_ERRORS as exc:
        logger.error("Error fetching analytics for course %s: %s", course_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch student analytics",
        )
