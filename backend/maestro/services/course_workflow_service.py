# backend/maestro/services/course_workflow_service.py
"""
Course Publication Workflow for the Maestro platform

draft -> pending -> approved -> published -> archived, with
pending -> rejected -> pending for resubmissions. Allowed edges come from
COURSE_TRANSITIONS; every status change is a conditional write guarded on the
allowed source states.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import CourseStatus
from ..core.exceptions import (
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)
from ..models.course import COURSE_TRANSITIONS, EDITABLE_COURSE_STATES, Course
from ..principal import CallerContext
from ..repositories.factory import RepositoryFactory
from ..schemas.course import CourseCreate, CourseUpdate
from .base import BaseService, utcnow

logger = logging.getLogger(__name__)


class CourseWorkflowService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_course_repository(db)

    @BaseService.measure_operation("create_course")
    def create_course(self, caller: CallerContext, data: CourseCreate) -> Course:
        self.require_mentor(caller, "create courses")
        with self.transaction():
            course = self.repository.create(
                mentor_id=caller.user_id,
                status=CourseStatus.DRAFT.value,
                resubmission_count=0,
                is_active=True,
                **data.model_dump(),
            )
        self.log_operation("course_created", course_id=course.id, mentor_id=caller.user_id)
        return course

    @BaseService.measure_operation("update_course")
    def update_course(self, caller: CallerContext, course_id: int, data: CourseUpdate) -> Course:
        """Edit a course's content. Only drafts and rejected courses are editable."""
        with self.transaction():
            course = self._get_course(course_id)
            self._require_owner(caller, course, "edit this course")
            if CourseStatus(course.status) not in EDITABLE_COURSE_STATES:
                raise InvalidTransitionException(
                    "Course",
                    course.status,
                    sorted(s.value for s in EDITABLE_COURSE_STATES),
                    message="Only draft or rejected courses can be edited",
                )
            course = self.repository.update(course_id, **data.model_dump(exclude_unset=True))
        return course

    @BaseService.measure_operation("submit_course")
    def submit(self, caller: CallerContext, course_id: int) -> Course:
        """
        Submit a course for review.

        Resubmitting a rejected course is allowed and counted, so reviewers can
        tell a re-review from a first submission.
        """
        with self.transaction():
            course = self._get_course(course_id)
            self._require_owner(caller, course, "submit this course")
            fields: Dict[str, Any] = {"submitted_at": utcnow()}
            if course.status == CourseStatus.REJECTED:
                fields["resubmission_count"] = (course.resubmission_count or 0) + 1
            self._apply("submit", course, caller, **fields)
        return course

    @BaseService.measure_operation("approve_course")
    def approve(
        self, caller: CallerContext, course_id: int, admin_notes: Optional[str] = None
    ) -> Course:
        return self._admin_transition("approve", caller, course_id, admin_notes)

    @BaseService.measure_operation("reject_course")
    def reject(
        self, caller: CallerContext, course_id: int, admin_notes: Optional[str] = None
    ) -> Course:
        return self._admin_transition("reject", caller, course_id, admin_notes)

    @BaseService.measure_operation("publish_course")
    def publish(
        self, caller: CallerContext, course_id: int, admin_notes: Optional[str] = None
    ) -> Course:
        return self._admin_transition(
            "publish", caller, course_id, admin_notes, published_at=utcnow()
        )

    @BaseService.measure_operation("archive_course")
    def archive(self, caller: CallerContext, course_id: int) -> Course:
        with self.transaction():
            course = self._get_course(course_id)
            self._require_owner(caller, course, "archive this course", allow_admin=True)
            self._apply("archive", course, caller, archived_at=utcnow())
        return course

    @BaseService.measure_operation("delete_course")
    def delete(self, caller: CallerContext, course_id: int) -> Course:
        """Soft delete: the row stays but disappears from every listing."""
        with self.transaction():
            course = self._get_course(course_id)
            self._require_owner(caller, course, "delete this course", allow_admin=True)
            self.repository.soft_delete(course_id)
        self.log_operation("course_deleted", course_id=course_id, deleted_by=caller.user_id)
        return course

    def get_course(self, course_id: int) -> Course:
        return self._get_course(course_id)

    def list_courses(
        self, status: Optional[CourseStatus] = None, mentor_id: Optional[int] = None
    ) -> List[Course]:
        return self.repository.list_active(status=status, mentor_id=mentor_id)

    def pending_review(self) -> List[Course]:
        return self.repository.list_active(status=CourseStatus.PENDING)

    def published(self) -> List[Course]:
        return self.repository.list_active(status=CourseStatus.PUBLISHED)

    # Helpers

    def _admin_transition(
        self,
        operation: str,
        caller: CallerContext,
        course_id: int,
        admin_notes: Optional[str],
        **fields: Any,
    ) -> Course:
        self.require_admin(caller, f"{operation} courses")
        with self.transaction():
            course = self._get_course(course_id)
            fields.update(reviewed_by=caller.user_id, reviewed_at=utcnow())
            if admin_notes is not None:
                fields["admin_notes"] = admin_notes
            self._apply(operation, course, caller, **fields)
        return course

    def _apply(self, operation: str, course: Course, caller: CallerContext, **fields: Any) -> None:
        sources, target = COURSE_TRANSITIONS[operation]
        if not self.repository.transition_status(course.id, sources, target, **fields):
            raise InvalidTransitionException(
                "Course", course.status, sorted(s.value for s in sources)
            )

        self.record_transition("Course", target)
        logger.info(
            f"Course {course.id} {operation}",
            extra={
                "event": "course_status_changed",
                "course_id": course.id,
                "operation": operation,
                "status": target.value,
                "actor_id": caller.user_id,
            },
        )

    def _get_course(self, course_id: int) -> Course:
        course = self.repository.get_active(course_id)
        if course is None:
            raise NotFoundException(f"Course {course_id} not found")
        return course

    @staticmethod
    def _require_owner(
        caller: CallerContext, course: Course, action: str, allow_admin: bool = False
    ) -> None:
        if allow_admin and caller.is_admin:
            return
        if course.mentor_id != caller.user_id:
            raise ForbiddenException(f"Only the course owner can {action}")
