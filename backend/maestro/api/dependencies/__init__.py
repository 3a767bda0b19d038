# backend/maestro/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import get_caller
from .database import get_db
from .services import (
    get_admin_review_service,
    get_course_service,
    get_membership_service,
    get_mentorship_service,
    get_schedule_service,
)

__all__ = [
    # Auth
    "get_caller",
    # Database
    "get_db",
    # Services
    "get_admin_review_service",
    "get_course_service",
    "get_membership_service",
    "get_mentorship_service",
    "get_schedule_service",
]
