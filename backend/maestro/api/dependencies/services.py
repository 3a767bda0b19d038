# backend/maestro/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each request gets fresh service instances bound to its database session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.admin_review_service import AdminReviewService
from ...services.course_workflow_service import CourseWorkflowService
from ...services.membership_service import MembershipService
from ...services.mentorship_service import MentorshipService
from ...services.schedule_service import ScheduleService
from .database import get_db


def get_membership_service(db: Session = Depends(get_db)) -> MembershipService:
    return MembershipService(db)


def get_mentorship_service(db: Session = Depends(get_db)) -> MentorshipService:
    return MentorshipService(db)


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)


def get_course_service(db: Session = Depends(get_db)) -> CourseWorkflowService:
    return CourseWorkflowService(db)


def get_admin_review_service(db: Session = Depends(get_db)) -> AdminReviewService:
    return AdminReviewService(db)
