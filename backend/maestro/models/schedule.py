# backend/maestro/models/schedule.py
"""
Weekly class timetable entries and the students enrolled in them.

A Schedule is a recurring slot (day of week plus HH:MM range) bound to a
classroom and an instructor. Times are stored as zero-padded 24-hour strings,
which order correctly under plain string comparison.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import EnrollmentStatus
from ..database import Base


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    max_students = Column(Integer, nullable=False, default=20)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    classroom = relationship("Classroom")
    instructor = relationship("User")

    __table_args__ = (
        Index("ix_schedules_instructor_day", "instructor_id", "day_of_week", "is_active"),
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_schedule_day"),
        CheckConstraint("start_time < end_time", name="ck_schedule_time_order"),
        CheckConstraint("max_students > 0", name="ck_schedule_max_students"),
    )

    def overlaps(self, start_time: str, end_time: str) -> bool:
        """Half-open interval overlap: [start, end) against this slot."""
        return start_time < self.end_time and self.start_time < end_time

    def __repr__(self) -> str:
        return (
            f"<Schedule {self.id} instructor={self.instructor_id} "
            f"day={self.day_of_week} {self.start_time}-{self.end_time}>"
        )


class ScheduleEnrollment(Base):
    """
    A student's seat in a schedule. One row per (schedule, student); leaving
    flips the status to unenrolled and enrolling again flips it back.
    """

    __tablename__ = "schedule_enrollments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=EnrollmentStatus.ENROLLED, index=True)
    enrolled_at = Column(DateTime(timezone=True), server_default=func.now())
    unenrolled_at = Column(DateTime(timezone=True), nullable=True)

    schedule = relationship("Schedule")
    student = relationship("User")

    __table_args__ = (
        UniqueConstraint("schedule_id", "student_id", name="uq_schedule_enrollment_student"),
        CheckConstraint(
            "status IN ('enrolled', 'unenrolled')", name="ck_schedule_enrollment_status"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ScheduleEnrollment schedule={self.schedule_id} "
            f"student={self.student_id} {self.status}>"
        )
