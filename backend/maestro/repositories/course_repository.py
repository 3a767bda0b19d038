# backend/maestro/repositories/course_repository.py
"""Course data access. Soft-deleted courses (is_active=False) are hidden from listings."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import CourseStatus
from ..models.course import Course
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CourseRepository(BaseRepository[Course]):
    def __init__(self, db: Session):
        super().__init__(db, Course)

    def get_active(self, course_id: int) -> Optional[Course]:
        course = self.get_by_id(course_id)
        if course is None or not course.is_active:
            return None
        return course

    def list_active(
        self, status: Optional[CourseStatus] = None, mentor_id: Optional[int] = None
    ) -> List[Course]:
        query = self._build_query().filter(Course.is_active.is_(True))
        if status is not None:
            query = query.filter(Course.status == status.value)
        if mentor_id is not None:
            query = query.filter(Course.mentor_id == mentor_id)
        return self._execute_query(query.order_by(Course.created_at.desc(), Course.id.desc()))

    def soft_delete(self, course_id: int) -> bool:
        """Hide a course from active listings. Returns False if it was already hidden."""
        course = self.get_active(course_id)
        if course is None:
            return False
        course.is_active = False
        self.db.flush()
        return True
