import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from lms_dashboard.core.config import CanvasConfig, Settings, get_settings
from lms_dashboard.core.deps import get_canvas_client
from lms_dashboard.main import app
from lms_dashboard.services.canvas import CanvasClient

CANVAS_URL = "http://canvas.test"
API_ROOT = f"{CANVAS_URL}/api/v1"

TEST_SETTINGS = Settings(
    canvas=CanvasConfig(base_url=CANVAS_URL, api_token="test-token"),
    student_task_timeout=5,
    master_password="password123",
    allowed_email_domain="anniecannons.com",
)

INSTRUCTOR_EMAIL = "teacher@anniecannons.com"


class FakeCanvas:
    """
    Serves canned JSON pages in place of the Canvas API.

    Routes are matched on path plus optional query params. Multi-page routes
    answer with a Link header whose "next" URL carries only `page` and the
    matched params, so follow-up requests are recognisable.
    """

    def __init__(self):
        self.routes = []
        self.requests: list[httpx.Request] = []

    def add(self, path, pages, match=None, fail_on_page=None, status_code=200):
        if isinstance(pages, dict) or not pages or not isinstance(pages[0], list):
            pages = [pages]
        self.routes.append(
            {
                "path": f"/api/v1{path}",
                "pages": pages,
                "match": match or {},
                "fail_on_page": fail_on_page,
                "status_code": status_code,
            }
        )

    def _find(self, request: httpx.Request):
        for route in self.routes:
            if route["path"] != request.url.path:
                continue
            params = request.url.params
            if all(params.get(k) == str(v) for k, v in route["match"].items()):
                return route
        return None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._find(request)
        if route is None:
            return httpx.Response(404, json={"errors": [{"message": "not found"}]})

        page = int(request.url.params.get("page", "1"))
        if route["status_code"] != 200 or page == route["fail_on_page"]:
            status_code = route["status_code"] if route["status_code"] != 200 else 500
            return httpx.Response(status_code, json={"errors": [{"message": "boom"}]})

        pages = route["pages"]
        headers = {}
        if page < len(pages):
            query = httpx.QueryParams({**route["match"], "page": page + 1})
            next_url = f"{API_ROOT}{route['path'][len('/api/v1'):]}?{query}"
            last_url = f"{API_ROOT}{route['path'][len('/api/v1'):]}?page={len(pages)}"
            headers["Link"] = f'<{next_url}>; rel="next", <{last_url}>; rel="last"'

        return httpx.Response(200, json=pages[page - 1], headers=headers)

    def client(self) -> CanvasClient:
        return CanvasClient(
            TEST_SETTINGS.canvas, transport=httpx.MockTransport(self.handler)
        )

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == f"/api/v1{path}"]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def fake_canvas():
    return FakeCanvas()


@pytest.fixture()
def client(fake_canvas):
    """Test client wired to the fake Canvas API via dependency overrides."""

    async def override_canvas_client():
        canvas = fake_canvas.client()
        try:
            yield canvas
        finally:
            await canvas.aclose()

    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[get_canvas_client] = override_canvas_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def logged_in(client):
    r = client.post(
        "/api/login", json={"email": INSTRUCTOR_EMAIL, "password": "password123"}
    )
    assert r.status_code == 200, r.text
    return client
