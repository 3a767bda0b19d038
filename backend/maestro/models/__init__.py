"""
Database models for the Maestro academy platform.

The models are organized by workflow:
- Users and roles
- Classrooms and memberships
- Reviewable requests (staff, resignation, master role, mentor application)
- Mentorship requests, conversations and sessions
- Weekly schedules and their enrollments
- Courses
"""

from .classroom import Classroom, ClassroomMembership
from .course import COURSE_TRANSITIONS, Course
from .mentorship import MentorConversation, MentorshipRequest, MentorshipSession
from .review_request import (
    MasterRoleRequest,
    MentorApplication,
    ResignationRequest,
    ReviewableRequestMixin,
    StaffRequest,
)
from .schedule import Schedule, ScheduleEnrollment
from .user import User

__all__ = [
    "COURSE_TRANSITIONS",
    "Classroom",
    "ClassroomMembership",
    "Course",
    "MasterRoleRequest",
    "MentorApplication",
    "MentorConversation",
    "MentorshipRequest",
    "MentorshipSession",
    "ResignationRequest",
    "ReviewableRequestMixin",
    "Schedule",
    "ScheduleEnrollment",
    "StaffRequest",
    "User",
]
