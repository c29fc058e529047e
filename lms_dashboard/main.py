import logging

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from lms_dashboard.core.config import get_settings
from lms_dashboard.core.logging_middleware import RequestLoggingMiddleware
from lms_dashboard.routers.auth import router as auth_router
from lms_dashboard.routers.courses import router as courses_router

logging.basicConfig(level=logging.INFO)

settings = get_settings()

app = FastAPI(title="LMS Analytics Dashboard")

# Middleware (last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
    same_site="none" if settings.is_production else "lax",
    https_only=settings.is_production,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check
@app.get("/api/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(auth_router, prefix="/api", tags=["auth"])
app.include_router(courses_router, prefix="/api/courses", tags=["courses"])
