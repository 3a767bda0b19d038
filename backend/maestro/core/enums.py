# backend/maestro/core/enums.py
"""
Core enums for the Maestro academy platform.

Every status and role value persisted by the workflow models is declared
here. All enums inherit from (str, Enum) so that the stored column value is
the lowercase enum value, and comparisons against raw strings keep working.
"""

from enum import Enum


class UserRole(str, Enum):
    """Platform-level account roles."""

    STUDENT = "student"
    MENTOR = "mentor"
    ADMIN = "admin"


class MembershipRole(str, Enum):
    """Role a user holds inside a single classroom."""

    MASTER = "master"
    STAFF = "staff"
    STUDENT = "student"


class MembershipStatus(str, Enum):
    """
    Classroom membership lifecycle.

    pending -> active -> removed, or pending -> removed. Nothing leaves removed.
    """

    PENDING = "pending"
    ACTIVE = "active"
    REMOVED = "removed"


class ReviewStatus(str, Enum):
    """Shared lifecycle of admin/master-reviewed requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewDecision(str, Enum):
    """Decision a reviewer submits for a reviewable request."""

    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> ReviewStatus:
        return ReviewStatus.APPROVED if self is ReviewDecision.APPROVE else ReviewStatus.REJECTED


class MentorshipRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class MentorshipSessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class CourseStatus(str, Enum):
    """Course publication states."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    PUBLISHED = "published"
    REJECTED = "rejected"
    ARCHIVED = "archived"


class EnrollmentStatus(str, Enum):
    """
    A student's seat in a weekly schedule.

    enrolled <-> unenrolled. Only enrolled rows count toward max_students.
    """

    ENROLLED = "enrolled"
    UNENROLLED = "unenrolled"
