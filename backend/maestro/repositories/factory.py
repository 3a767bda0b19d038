# backend/maestro/repositories/factory.py
"""
Repository Factory for the Maestro platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING, Type

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .classroom_repository import ClassroomMembershipRepository, ClassroomRepository
    from .course_repository import CourseRepository
    from .mentorship_repository import (
        MentorConversationRepository,
        MentorshipRequestRepository,
        MentorshipSessionRepository,
    )
    from .review_request_repository import ReviewRequestRepository
    from .schedule_repository import ScheduleEnrollmentRepository, ScheduleRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_classroom_repository(db: Session) -> "ClassroomRepository":
        from .classroom_repository import ClassroomRepository

        return ClassroomRepository(db)

    @staticmethod
    def create_membership_repository(db: Session) -> "ClassroomMembershipRepository":
        from .classroom_repository import ClassroomMembershipRepository

        return ClassroomMembershipRepository(db)

    @staticmethod
    def create_review_request_repository(db: Session, model: Type) -> "ReviewRequestRepository":
        """Create a repository for any pending/approved/rejected request model."""
        from .review_request_repository import ReviewRequestRepository

        return ReviewRequestRepository(db, model)

    @staticmethod
    def create_mentorship_request_repository(db: Session) -> "MentorshipRequestRepository":
        from .mentorship_repository import MentorshipRequestRepository

        return MentorshipRequestRepository(db)

    @staticmethod
    def create_conversation_repository(db: Session) -> "MentorConversationRepository":
        from .mentorship_repository import MentorConversationRepository

        return MentorConversationRepository(db)

    @staticmethod
    def create_mentorship_session_repository(db: Session) -> "MentorshipSessionRepository":
        from .mentorship_repository import MentorshipSessionRepository

        return MentorshipSessionRepository(db)

    @staticmethod
    def create_schedule_repository(db: Session) -> "ScheduleRepository":
        from .schedule_repository import ScheduleRepository

        return ScheduleRepository(db)

    @staticmethod
    def create_schedule_enrollment_repository(db: Session) -> "ScheduleEnrollmentRepository":
        from .schedule_repository import ScheduleEnrollmentRepository

        return ScheduleEnrollmentRepository(db)

    @staticmethod
    def create_course_repository(db: Session) -> "CourseRepository":
        from .course_repository import CourseRepository

        return CourseRepository(db)
