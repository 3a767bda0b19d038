# backend/maestro/main.py
"""
FastAPI application for the Maestro academy platform.

Run locally with ``uvicorn maestro.main:app`` from the backend directory.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import is_running_tests, settings
from .database import engine
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes.v1 import (
    admin_reviews as admin_reviews_v1,
    classrooms as classrooms_v1,
    courses as courses_v1,
    health as health_v1,
    mentorship as mentorship_v1,
    prometheus as prometheus_v1,
    schedules as schedules_v1,
    staff_requests as staff_requests_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Environment: {settings.environment}")

    if is_running_tests():
        logger.info("Running under pytest (test mode active)")
    else:
        logger.info("Schema is managed by alembic; run `alembic upgrade head` from backend/")

    yield

    logger.info(f"{settings.app_name} shutting down...")
    engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Classroom membership, mentorship, scheduling and course publication workflows",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.cors_origins)

if settings.prometheus_enabled:
    app.add_middleware(PrometheusMiddleware)

api = APIRouter(prefix="/api")
api.include_router(health_v1.router)
api.include_router(classrooms_v1.router, prefix="/classrooms")
api.include_router(staff_requests_v1.router, prefix="/staff-requests")
api.include_router(staff_requests_v1.resignation_router, prefix="/resignation-requests")
api.include_router(admin_reviews_v1.mentor_applications_router, prefix="/mentor-applications")
api.include_router(admin_reviews_v1.master_role_router, prefix="/master-role-requests")
api.include_router(mentorship_v1.router, prefix="/mentorship-requests")
api.include_router(mentorship_v1.sessions_router, prefix="/mentorship-sessions")
api.include_router(schedules_v1.router, prefix="/schedules")
api.include_router(courses_v1.router, prefix="/courses")

app.include_router(api)

if settings.prometheus_enabled:
    app.include_router(prometheus_v1.router)


__all__ = ["app"]
