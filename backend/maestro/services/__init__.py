"""
Service layer for the Maestro platform.

Each service owns one workflow and its transaction boundaries. Services raise
domain exceptions from ``maestro.core.exceptions``; they never build HTTP
responses.
"""

from .admin_review_service import AdminReviewService
from .base import BaseService
from .course_workflow_service import CourseWorkflowService
from .membership_service import MembershipService
from .mentorship_service import MentorshipService
from .review_workflow import ReviewWorkflow
from .schedule_service import ScheduleService

__all__ = [
    "AdminReviewService",
    "BaseService",
    "CourseWorkflowService",
    "MembershipService",
    "MentorshipService",
    "ReviewWorkflow",
    "ScheduleService",
]
