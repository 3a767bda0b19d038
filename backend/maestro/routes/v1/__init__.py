# backend/maestro/routes/v1/__init__.py
"""
API routes, mounted under /api by ``maestro.main``.
"""

from . import admin_reviews, classrooms, courses, health, mentorship, prometheus, schedules, staff_requests

__all__ = [
    "admin_reviews",
    "classrooms",
    "courses",
    "health",
    "mentorship",
    "prometheus",
    "schedules",
    "staff_requests",
]
