# backend/maestro/services/schedule_service.py
"""
Schedule Service for the Maestro platform

Weekly timetable management with instructor conflict detection, and the
student enrollments that fill each schedule up to its max_students.

Slots are half-open ``[start, end)`` ranges of zero-padded ``HH:MM`` strings,
so back-to-back classes (09:00-10:00 then 10:00-11:00) do not conflict.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import EnrollmentStatus, MembershipRole
from ..core.exceptions import (
    CapacityExceededException,
    DuplicateRequestException,
    ForbiddenException,
    NotFoundException,
    SchedulingConflictException,
    ValidationException,
)
from ..models.classroom import Classroom
from ..models.schedule import Schedule, ScheduleEnrollment
from ..principal import CallerContext
from ..repositories.factory import RepositoryFactory
from .base import BaseService, utcnow

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

UPDATABLE_FIELDS = frozenset(
    {"title", "description", "day_of_week", "start_time", "end_time", "max_students"}
)


def validate_slot(day_of_week: int, start_time: str, end_time: str) -> None:
    """
    Validate a weekly slot.

    Raises:
        ValidationException: bad HH:MM format, start not before end, or day outside 0-6
    """
    for field, value in (("start_time", start_time), ("end_time", end_time)):
        if not isinstance(value, str) or not TIME_PATTERN.match(value):
            raise ValidationException(
                f"{field} must be a 24-hour HH:MM time", details={"field": field, "value": value}
            )
    if start_time >= end_time:
        raise ValidationException(
            "start_time must be before end_time",
            details={"start_time": start_time, "end_time": end_time},
        )
    if not 0 <= day_of_week <= 6:
        raise ValidationException(
            "day_of_week must be between 0 (Sunday) and 6",
            details={"day_of_week": day_of_week},
        )


class ScheduleService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_schedule_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.classroom_repository = RepositoryFactory.create_classroom_repository(db)
        self.membership_repository = RepositoryFactory.create_membership_repository(db)
        self.enrollment_repository = RepositoryFactory.create_schedule_enrollment_repository(db)

    @BaseService.measure_operation("check_availability")
    def check_availability(
        self,
        instructor_id: int,
        day_of_week: int,
        start_time: str,
        end_time: str,
        exclude_schedule_id: Optional[int] = None,
    ) -> bool:
        """Return True if the instructor has no active schedule overlapping the slot."""
        validate_slot(day_of_week, start_time, end_time)
        return self._find_conflict(
            instructor_id, day_of_week, start_time, end_time, exclude_schedule_id
        ) is None

    @BaseService.measure_operation("create_schedule")
    def create_schedule(
        self,
        caller: CallerContext,
        classroom_id: int,
        title: str,
        day_of_week: int,
        start_time: str,
        end_time: str,
        instructor_id: int,
        max_students: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Schedule:
        """
        Create a weekly slot for an instructor.

        The instructor's row is locked before the availability check, so the
        check and the insert are one atomic step per instructor.
        """
        validate_slot(day_of_week, start_time, end_time)
        if max_students is None:
            max_students = settings.default_schedule_capacity
        elif max_students <= 0:
            raise ValidationException(
                "max_students must be positive", details={"max_students": max_students}
            )

        with self.transaction():
            classroom = self._get_classroom(classroom_id)
            self._require_schedule_manager(caller, classroom)

            self._lock_instructor(instructor_id)
            self._ensure_available(instructor_id, day_of_week, start_time, end_time)

            schedule = self.repository.create(
                classroom_id=classroom_id,
                title=title,
                description=description,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                instructor_id=instructor_id,
                max_students=max_students,
                is_active=True,
            )

        self.log_operation(
            "schedule_created",
            schedule_id=schedule.id,
            classroom_id=classroom_id,
            instructor_id=instructor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
        return schedule

    @BaseService.measure_operation("update_schedule")
    def update_schedule(self, caller: CallerContext, schedule_id: int, **changes: Any) -> Schedule:
        """Apply changes to an active schedule, re-checking availability without itself."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                "Unknown schedule fields", details={"fields": sorted(unknown)}
            )
        updates: Dict[str, Any] = {k: v for k, v in changes.items() if v is not None}

        with self.transaction():
            schedule = self._get_active_schedule(schedule_id, for_update=True)
            classroom = self._get_classroom(schedule.classroom_id)
            self._require_schedule_manager(caller, classroom)

            day_of_week = updates.get("day_of_week", schedule.day_of_week)
            start_time = updates.get("start_time", schedule.start_time)
            end_time = updates.get("end_time", schedule.end_time)
            validate_slot(day_of_week, start_time, end_time)
            if "max_students" in updates:
                enrolled = self.enrollment_repository.count_enrolled(schedule_id)
                if updates["max_students"] < enrolled:
                    raise ValidationException(
                        "max_students cannot drop below the number of enrolled students",
                        details={"max_students": updates["max_students"], "enrolled": enrolled},
                    )

            self._lock_instructor(schedule.instructor_id)
            self._ensure_available(
                schedule.instructor_id, day_of_week, start_time, end_time, schedule_id
            )
            schedule = self.repository.update(schedule_id, **updates)

        self.log_operation("schedule_updated", schedule_id=schedule_id, fields=sorted(updates))
        return schedule

    @BaseService.measure_operation("deactivate_schedule")
    def deactivate_schedule(self, caller: CallerContext, schedule_id: int) -> Schedule:
        with self.transaction():
            schedule = self._get_active_schedule(schedule_id)
            classroom = self._get_classroom(schedule.classroom_id)
            self._require_schedule_manager(caller, classroom)
            schedule = self.repository.update(schedule_id, is_active=False)

        self.log_operation("schedule_deactivated", schedule_id=schedule_id)
        return schedule

    def list_schedules(
        self,
        classroom_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
        day_of_week: Optional[int] = None,
    ) -> List[Schedule]:
        return self.repository.list_filtered(
            classroom_id=classroom_id, instructor_id=instructor_id, day_of_week=day_of_week
        )

    # Enrollments

    @BaseService.measure_operation("enroll_student")
    def enroll_student(
        self, caller: CallerContext, schedule_id: int, student_id: Optional[int] = None
    ) -> ScheduleEnrollment:
        """
        Give a student a seat in a schedule.

        Students enroll themselves; the classroom master, its staff or an admin
        may enroll any active student of the classroom. The schedule row is
        locked for the capacity check so concurrent enrollments cannot overfill it.

        Raises:
            NotFoundException: schedule missing or deactivated
            ForbiddenException: caller may not enroll this student, or the student
                is not an active student of the classroom
            DuplicateRequestException: student is already enrolled
            CapacityExceededException: schedule is full
        """
        student_id = caller.user_id if student_id is None else student_id

        with self.transaction():
            schedule = self._get_active_schedule(schedule_id, for_update=True)
            if student_id != caller.user_id:
                self._require_schedule_manager(caller, self._get_classroom(schedule.classroom_id))
            student = self.membership_repository.get_active_for_user(
                student_id, schedule.classroom_id, MembershipRole.STUDENT
            )
            if student is None:
                raise ForbiddenException(
                    "Only active students of the classroom can enroll in its schedules",
                    details={"student_id": student_id, "classroom_id": schedule.classroom_id},
                )

            existing = self.enrollment_repository.get_for_student(schedule_id, student_id)
            if existing is not None and existing.status == EnrollmentStatus.ENROLLED:
                raise DuplicateRequestException(
                    "Student is already enrolled in this schedule",
                    details={"schedule_id": schedule_id, "student_id": student_id},
                )

            current = self.enrollment_repository.count_enrolled(schedule_id)
            if current >= schedule.max_students:
                raise CapacityExceededException(
                    schedule.max_students, current, message="Schedule is full"
                )

            if existing is not None:
                if not self.enrollment_repository.transition_status(
                    existing.id,
                    [EnrollmentStatus.UNENROLLED],
                    EnrollmentStatus.ENROLLED,
                    enrolled_at=utcnow(),
                    unenrolled_at=None,
                ):
                    raise DuplicateRequestException(
                        "Student is already enrolled in this schedule",
                        details={"schedule_id": schedule_id, "student_id": student_id},
                    )
                enrollment = existing
            else:
                try:
                    enrollment = self.enrollment_repository.create(
                        schedule_id=schedule_id,
                        student_id=student_id,
                        status=EnrollmentStatus.ENROLLED.value,
                    )
                except IntegrityError:
                    raise DuplicateRequestException(
                        "Student is already enrolled in this schedule",
                        details={"schedule_id": schedule_id, "student_id": student_id},
                    )

        self.record_transition("ScheduleEnrollment", EnrollmentStatus.ENROLLED)
        self.log_operation(
            "schedule_enrolled",
            schedule_id=schedule_id,
            student_id=student_id,
            enrolled_by=caller.user_id,
            seats_taken=current + 1,
        )
        return enrollment

    @BaseService.measure_operation("unenroll_student")
    def unenroll_student(
        self, caller: CallerContext, schedule_id: int, student_id: Optional[int] = None
    ) -> ScheduleEnrollment:
        """Free a student's seat. Students leave on their own; managers may remove anyone."""
        student_id = caller.user_id if student_id is None else student_id

        with self.transaction():
            schedule = self._get_active_schedule(schedule_id)
            if student_id != caller.user_id:
                self._require_schedule_manager(caller, self._get_classroom(schedule.classroom_id))

            enrollment = self.enrollment_repository.get_for_student(schedule_id, student_id)
            if enrollment is None or not self.enrollment_repository.transition_status(
                enrollment.id,
                [EnrollmentStatus.ENROLLED],
                EnrollmentStatus.UNENROLLED,
                unenrolled_at=utcnow(),
            ):
                raise NotFoundException(
                    f"Student {student_id} is not enrolled in schedule {schedule_id}"
                )

        self.record_transition("ScheduleEnrollment", EnrollmentStatus.UNENROLLED)
        self.log_operation(
            "schedule_unenrolled",
            schedule_id=schedule_id,
            student_id=student_id,
            removed_by=caller.user_id,
        )
        return enrollment

    def list_enrollments(self, schedule_id: int) -> List[ScheduleEnrollment]:
        self._get_active_schedule(schedule_id)
        return self.enrollment_repository.list_for_schedule(schedule_id)

    def list_student_schedules(self, student_id: int) -> List[ScheduleEnrollment]:
        return self.enrollment_repository.list_for_student(student_id)

    # Helpers

    def _find_conflict(
        self,
        instructor_id: int,
        day_of_week: int,
        start_time: str,
        end_time: str,
        exclude_schedule_id: Optional[int] = None,
    ) -> Optional[Schedule]:
        for existing in self.repository.get_active_for_instructor_day(
            instructor_id, day_of_week, exclude_schedule_id
        ):
            if existing.overlaps(start_time, end_time):
                return existing
        return None

    def _ensure_available(
        self,
        instructor_id: int,
        day_of_week: int,
        start_time: str,
        end_time: str,
        exclude_schedule_id: Optional[int] = None,
    ) -> None:
        conflict = self._find_conflict(
            instructor_id, day_of_week, start_time, end_time, exclude_schedule_id
        )
        if conflict is not None:
            raise SchedulingConflictException(
                "Instructor already has a class at this time",
                details={
                    "conflicting_schedule_id": conflict.id,
                    "instructor_id": instructor_id,
                    "day_of_week": day_of_week,
                    "existing_start": conflict.start_time,
                    "existing_end": conflict.end_time,
                },
            )

    def _lock_instructor(self, instructor_id: int) -> None:
        if self.user_repository.lock_user(instructor_id) is None:
            raise NotFoundException(f"Instructor {instructor_id} not found")

    def _get_classroom(self, classroom_id: int) -> Classroom:
        classroom = self.classroom_repository.get_active(classroom_id)
        if classroom is None:
            raise NotFoundException(f"Classroom {classroom_id} not found")
        return classroom

    def _get_active_schedule(self, schedule_id: int, for_update: bool = False) -> Schedule:
        schedule = self.repository.get_by_id(schedule_id, for_update=for_update)
        if schedule is None or not schedule.is_active:
            raise NotFoundException(f"Schedule {schedule_id} not found")
        return schedule

    def _require_schedule_manager(self, caller: CallerContext, classroom: Classroom) -> None:
        if caller.is_admin or classroom.master_id == caller.user_id:
            return
        staff = self.membership_repository.get_active_for_user(
            caller.user_id, classroom.id, MembershipRole.STAFF
        )
        if staff is None:
            raise ForbiddenException(
                "Only the classroom master, its staff or an admin can manage schedules"
            )
