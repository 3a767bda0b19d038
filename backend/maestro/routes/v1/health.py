# backend/maestro/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer checks.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from ...core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    return {
        "status": "healthy",
        "service": settings.app_name,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
