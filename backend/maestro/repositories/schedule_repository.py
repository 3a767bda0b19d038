# backend/maestro/repositories/schedule_repository.py
"""
Schedule Repository for the Maestro platform

Timetable queries used by the availability checker. Only active rows take
part in conflict detection; deactivated schedules free their slot.

Enrollment queries count only enrolled rows against a schedule's max_students.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import EnrollmentStatus
from ..core.exceptions import RepositoryException
from ..models.schedule import Schedule, ScheduleEnrollment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ScheduleRepository(BaseRepository[Schedule]):
    def __init__(self, db: Session):
        super().__init__(db, Schedule)

    def get_active_for_instructor_day(
        self,
        instructor_id: int,
        day_of_week: int,
        exclude_schedule_id: Optional[int] = None,
    ) -> List[Schedule]:
        """
        Get active schedules that could conflict with a slot on a given day.

        Args:
            instructor_id: The instructor to check
            day_of_week: 0 (Sunday) to 6
            exclude_schedule_id: Optional schedule to leave out (used when editing it)

        Returns:
            Schedules ordered by start time
        """
        try:
            query = self.db.query(Schedule).filter(
                Schedule.instructor_id == instructor_id,
                Schedule.day_of_week == day_of_week,
                Schedule.is_active.is_(True),
            )
            if exclude_schedule_id is not None:
                query = query.filter(Schedule.id != exclude_schedule_id)
            return query.order_by(Schedule.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting schedules for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict schedules: {str(e)}")

    def list_filtered(
        self,
        classroom_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
        day_of_week: Optional[int] = None,
        include_inactive: bool = False,
    ) -> List[Schedule]:
        query = self._build_query()
        if classroom_id is not None:
            query = query.filter(Schedule.classroom_id == classroom_id)
        if instructor_id is not None:
            query = query.filter(Schedule.instructor_id == instructor_id)
        if day_of_week is not None:
            query = query.filter(Schedule.day_of_week == day_of_week)
        if not include_inactive:
            query = query.filter(Schedule.is_active.is_(True))
        return self._execute_query(query.order_by(Schedule.day_of_week, Schedule.start_time))


class ScheduleEnrollmentRepository(BaseRepository[ScheduleEnrollment]):
    def __init__(self, db: Session):
        super().__init__(db, ScheduleEnrollment)

    def get_for_student(self, schedule_id: int, student_id: int) -> Optional[ScheduleEnrollment]:
        """Return the (schedule, student) row whatever its status."""
        return self.find_one_by(schedule_id=schedule_id, student_id=student_id)

    def count_enrolled(self, schedule_id: int) -> int:
        return self.count(schedule_id=schedule_id, status=EnrollmentStatus.ENROLLED.value)

    def list_for_schedule(self, schedule_id: int) -> List[ScheduleEnrollment]:
        query = self._build_query().filter(
            ScheduleEnrollment.schedule_id == schedule_id,
            ScheduleEnrollment.status == EnrollmentStatus.ENROLLED.value,
        )
        return self._execute_query(
            query.order_by(ScheduleEnrollment.enrolled_at, ScheduleEnrollment.id)
        )

    def list_for_student(self, student_id: int) -> List[ScheduleEnrollment]:
        """Enrolled rows for a student, restricted to schedules that are still active."""
        query = (
            self._build_query()
            .join(Schedule, Schedule.id == ScheduleEnrollment.schedule_id)
            .filter(
                ScheduleEnrollment.student_id == student_id,
                ScheduleEnrollment.status == EnrollmentStatus.ENROLLED.value,
                Schedule.is_active.is_(True),
            )
        )
        return self._execute_query(query.order_by(Schedule.day_of_week, Schedule.start_time))
