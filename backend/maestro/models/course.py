# backend/maestro/models/course.py
"""
Course model and its publication state machine.

Transitions are declared once in COURSE_TRANSITIONS so that the service layer
and the conditional status update agree on which source states are allowed.
"""

from typing import Dict, FrozenSet, Tuple

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import CourseStatus
from ..database import Base

# operation -> (allowed source states, target state)
COURSE_TRANSITIONS: Dict[str, Tuple[FrozenSet[CourseStatus], CourseStatus]] = {
    "submit": (frozenset({CourseStatus.DRAFT, CourseStatus.REJECTED}), CourseStatus.PENDING),
    "approve": (frozenset({CourseStatus.PENDING}), CourseStatus.APPROVED),
    "reject": (frozenset({CourseStatus.PENDING}), CourseStatus.REJECTED),
    "publish": (frozenset({CourseStatus.APPROVED}), CourseStatus.PUBLISHED),
    "archive": (frozenset({CourseStatus.PUBLISHED}), CourseStatus.ARCHIVED),
}

EDITABLE_COURSE_STATES: FrozenSet[CourseStatus] = frozenset(
    {CourseStatus.DRAFT, CourseStatus.REJECTED}
)


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)  # piano, guitar, vocals, ...
    level = Column(String(30), nullable=False)  # beginner, intermediate, advanced
    price = Column(Numeric(10, 2), nullable=True)
    duration_minutes = Column(Integer, nullable=True)

    status = Column(String(20), nullable=False, default=CourseStatus.DRAFT, index=True)
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    resubmission_count = Column(Integer, nullable=False, default=0)
    published_at = Column(DateTime(timezone=True), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    mentor = relationship("User", foreign_keys=[mentor_id])

    def __repr__(self) -> str:
        return f"<Course {self.id} '{self.title}' {self.status}>"
