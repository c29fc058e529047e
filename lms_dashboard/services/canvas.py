import logging
from typing import Any

import httpx

from lms_dashboard.core.config import CanvasConfig
from lms_dashboard.schemas.canvas import (
    CanvasAssignment,
    CanvasCourse,
    CanvasSubmission,
    CanvasUser,
)

logger = logging.getLogger(__name__)


class CanvasClient:
    """Async Canvas API client that resolves paginated collections."""

    def __init__(
        self,
        config: CanvasConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.api_root,
            headers={"Authorization": f"Bearer {config.api_token}"},
            timeout=config.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "CanvasClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_all(
        self, path: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """
        Fetch every page of a collection and return the records in order.

        Only the first request carries `params`; continuation URLs from the
        Link header already embed the query string. HTTP errors propagate.
        """
        records: list[dict[str, Any]] = []
        url: str | None = path
        pages = 0

        while url:
            response = await self._http.get(url, params=params)
            response.raise_for_status()
            pages += 1

            payload = response.json()
            if isinstance(payload, list):
                records.extend(payload)
            else:
                records.append(payload)

            # Link: <...>; rel="next" is absent on the last page
            url = response.links.get("next", {}).get("url")
            params = None

        logger.debug("Fetched %d records from %s in %d page(s)", len(records), path, pages)
        return records


async def fetch_courses(client: CanvasClient) -> list[CanvasCourse]:
    """Active courses the token holder teaches."""
    raw = await client.fetch_all(
        "/courses",
        {
            "enrollment_type": "teacher",
            "enrollment_state": "active",
            "include[]": ["total_students"],
            "per_page": client.config.per_page,
        },
    )
    return [CanvasCourse.model_validate(c) for c in raw]


async def fetch_students(client: CanvasClient, course_id: int) -> list[CanvasUser]:
    raw = await client.fetch_all(
        f"/courses/{course_id}/users",
        {
            "enrollment_type[]": ["student"],
            "enrollment_state[]": ["active"],
            "per_page": client.config.per_page,
        },
    )
    return [CanvasUser.model_validate(u) for u in raw]


async def fetch_assignments(
    client: CanvasClient, course_id: int
) -> list[CanvasAssignment]:
    raw = await client.fetch_all(
        f"/courses/{course_id}/assignments",
        {"per_page": client.config.per_page},
    )
    return [CanvasAssignment.model_validate(a) for a in raw]


async def fetch_submissions(
    client: CanvasClient, course_id: int, student_id: int
) -> list[CanvasSubmission]:
    """One student's submissions, with comments included."""
    raw = await client.fetch_all(
        f"/courses/{course_id}/students/submissions",
        {
            "student_ids[]": [student_id],
            "include[]": ["submission_comments"],
            "per_page": client.config.per_page,
        },
    )
    return [CanvasSubmission.model_validate(s) for s in raw]
