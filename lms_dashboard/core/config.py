import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# Submission types that never require a student hand-in
NON_REQUIRED_SUBMISSION_TYPES = frozenset({"none", "not_graded", "on_paper"})


class CanvasConfig(BaseModel):
    """Connection details for the upstream Canvas API."""

    base_url: str
    api_token: str
    per_page: int = 100
    request_timeout: float = 30.0

    class Config:
        frozen = True

    @property
    def api_root(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/v1"


class Settings(BaseModel):
    canvas: CanvasConfig

    # seconds a single student's fetch-and-classify may take
    student_task_timeout: float = 60.0

    master_password: str = "changeThisPassword123"
    allowed_email_domain: str = "anniecannons.com"

    session_secret: str = "your-secret-key-change-this"
    session_max_age: int = 24 * 60 * 60
    allowed_origins: tuple[str, ...] = ("*",)
    environment: str = "development"

    class Config:
        frozen = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _origins(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ("*",)
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def load_settings() -> Settings:
    env = os.environ
    return Settings(
        canvas=CanvasConfig(
            base_url=env.get("CANVAS_BASE_URL", ""),
            api_token=env.get("CANVAS_API_TOKEN", ""),
            per_page=int(env.get("CANVAS_PER_PAGE", "100")),
            request_timeout=float(env.get("CANVAS_REQUEST_TIMEOUT", "30")),
        ),
        student_task_timeout=float(env.get("STUDENT_TASK_TIMEOUT", "60")),
        master_password=env.get("MASTER_PASSWORD", "changeThisPassword123"),
        allowed_email_domain=env.get("ALLOWED_EMAIL_DOMAIN", "anniecannons.com"),
        session_secret=env.get("SESSION_SECRET", "your-secret-key-change-this"),
        session_max_age=int(env.get("SESSION_MAX_AGE", str(24 * 60 * 60))),
        allowed_origins=_origins(env.get("ALLOWED_ORIGINS")),
        environment=env.get("APP_ENV", "development"),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
