# backend/maestro/models/mentorship.py
"""
Mentorship models: the request that opens a student-mentor relationship, the
conversation attached to it, and the sessions scheduled under it.
"""

from datetime import timedelta

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
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import MentorshipRequestStatus, MentorshipSessionStatus
from ..database import Base


class MentorshipRequest(Base):
    __tablename__ = "mentorship_requests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    status = Column(
        String(20), nullable=False, default=MentorshipRequestStatus.PENDING, index=True
    )
    mentor_response = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    student = relationship("User", foreign_keys=[student_id])
    mentor = relationship("User", foreign_keys=[mentor_id])
    messages = relationship(
        "MentorConversation",
        back_populates="mentorship_request",
        order_by="MentorConversation.id",
    )
    sessions = relationship("MentorshipSession", back_populates="mentorship_request")

    __table_args__ = (Index("ix_mentorship_pair", "student_id", "mentor_id", "status"),)

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.student_id, self.mentor_id)


class MentorConversation(Base):
    """One message in a mentorship conversation. Rows are append-only."""

    __tablename__ = "mentor_conversations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    mentorship_request_id = Column(
        Integer, ForeignKey("mentorship_requests.id"), nullable=False, index=True
    )
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    mentorship_request = relationship("MentorshipRequest", back_populates="messages")
    sender = relationship("User")


class MentorshipSession(Base):
    """
    A meeting scheduled under an accepted mentorship request.

    mentor_id is copied from the request so that overlap checks across all of
    a mentor's requests are a single indexed query.
    """

    __tablename__ = "mentorship_sessions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    mentorship_request_id = Column(
        Integer, ForeignKey("mentorship_requests.id"), nullable=False, index=True
    )
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)
    status = Column(
        String(20), nullable=False, default=MentorshipSessionStatus.SCHEDULED, index=True
    )
    meeting_link = Column(String(500), nullable=True)
    mentor_notes = Column(Text, nullable=True)
    rating = Column(Integer, nullable=True)
    session_feedback = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    mentorship_request = relationship("MentorshipRequest", back_populates="sessions")

    __table_args__ = (
        Index("ix_mentorship_session_mentor_time", "mentor_id", "scheduled_at"),
        CheckConstraint("duration_minutes > 0", name="ck_session_duration_positive"),
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_session_rating"),
    )

    @property
    def ends_at(self):
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)
