# backend/maestro/repositories/__init__.py
"""
Repository Pattern Implementation for the Maestro platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
  and the atomic ``transition_status`` compare-and-swap
- RepositoryFactory: Factory for creating repository instances
- ReviewRequestRepository: One repository for every pending/approved/rejected
  request table

Usage:
    from maestro.repositories import RepositoryFactory

    repository = RepositoryFactory.create_schedule_repository(db)
    slots = repository.get_active_for_instructor_day(instructor_id, 1)
"""

from .base_repository import BaseRepository
from .classroom_repository import ClassroomMembershipRepository, ClassroomRepository
from .course_repository import CourseRepository
from .factory import RepositoryFactory
from .mentorship_repository import (
    MentorConversationRepository,
    MentorshipRequestRepository,
    MentorshipSessionRepository,
)
from .review_request_repository import ReviewRequestRepository
from .schedule_repository import ScheduleEnrollmentRepository, ScheduleRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ClassroomMembershipRepository",
    "ClassroomRepository",
    "CourseRepository",
    "MentorConversationRepository",
    "MentorshipRequestRepository",
    "MentorshipSessionRepository",
    "RepositoryFactory",
    "ReviewRequestRepository",
    "ScheduleEnrollmentRepository",
    "ScheduleRepository",
    "UserRepository",
]
