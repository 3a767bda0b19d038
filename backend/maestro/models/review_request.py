# backend/maestro/models/review_request.py
"""
Reviewable request models.

Staff requests, resignation requests, master role requests and mentor
applications all share the same pending -> approved | rejected lifecycle with
a recorded reviewer. The shared columns live in ReviewableRequestMixin; what
happens on approval is decided by the service that owns each request type.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declared_attr, relationship
from sqlalchemy.sql import func

from ..core.enums import ReviewStatus
from ..database import Base


class ReviewableRequestMixin:
    """Columns shared by every pending/approved/rejected request table."""

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    status = Column(String(20), nullable=False, default=ReviewStatus.PENDING, index=True)
    admin_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @declared_attr
    def reviewed_by(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=True)

    @property
    def is_pending(self) -> bool:
        return self.status == ReviewStatus.PENDING


class StaffRequest(ReviewableRequestMixin, Base):
    """A mentor asking to teach in another master's classroom."""

    __tablename__ = "staff_requests"

    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False, index=True)
    message = Column(Text, nullable=True)

    mentor = relationship("User", foreign_keys=[mentor_id])
    classroom = relationship("Classroom")


class ResignationRequest(ReviewableRequestMixin, Base):
    """A staff mentor asking to leave a classroom."""

    __tablename__ = "resignation_requests"

    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False, index=True)
    reason = Column(Text, nullable=False)

    mentor = relationship("User", foreign_keys=[mentor_id])
    classroom = relationship("Classroom")


class MasterRoleRequest(ReviewableRequestMixin, Base):
    """A mentor asking to be promoted to master (allowed to own classrooms)."""

    __tablename__ = "master_role_requests"

    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reason = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)

    mentor = relationship("User", foreign_keys=[mentor_id])


class MentorApplication(ReviewableRequestMixin, Base):
    """A student applying to become a mentor."""

    __tablename__ = "mentor_applications"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    instrument = Column(String(100), nullable=False)
    experience = Column(Text, nullable=True)
    motivation = Column(Text, nullable=True)

    user = relationship("User", foreign_keys=[user_id])
