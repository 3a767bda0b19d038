# backend/maestro/models/classroom.py
"""
Classroom (academy) and classroom membership models.

A classroom is owned by exactly one master. Every user's relationship to a
classroom is a single ClassroomMembership row, which is never deleted: removal
is recorded by moving the row to the ``removed`` status.
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

from ..core.enums import MembershipRole, MembershipStatus
from ..database import Base


class Classroom(Base):
    __tablename__ = "classrooms"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    master_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    subject = Column(String(100), nullable=False)
    level = Column(String(50), nullable=False)

    # Branding
    academy_name = Column(String(200), nullable=True)
    logo_url = Column(String(500), nullable=True)
    primary_color = Column(String(20), nullable=True)

    max_students = Column(Integer, nullable=False, default=50)
    is_public = Column(Boolean, nullable=False, default=True)
    custom_slug = Column(String(100), unique=True, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    master = relationship("User", foreign_keys=[master_id])
    memberships = relationship("ClassroomMembership", back_populates="classroom")

    __table_args__ = (CheckConstraint("max_students > 0", name="ck_classrooms_max_students"),)

    def __repr__(self) -> str:
        return f"<Classroom {self.id} '{self.title}' master={self.master_id}>"


class ClassroomMembership(Base):
    """
    A user's role and standing within one classroom.

    At most one row exists per (user_id, classroom_id).
    """

    __tablename__ = "classroom_memberships"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False)
    role = Column(String(20), nullable=False, default=MembershipRole.STUDENT)
    status = Column(String(20), nullable=False, default=MembershipStatus.PENDING, index=True)
    message = Column(Text, nullable=True)

    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    removed_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", foreign_keys=[user_id])
    classroom = relationship("Classroom", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("user_id", "classroom_id", name="uq_membership_user_classroom"),
        Index("ix_membership_classroom_status", "classroom_id", "status"),
        CheckConstraint(
            "role IN ('master', 'staff', 'student')",
            name="ck_membership_role",
        ),
        CheckConstraint(
            "status IN ('pending', 'active', 'removed')",
            name="ck_membership_status",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ClassroomMembership user={self.user_id} classroom={self.classroom_id} "
            f"{self.role}/{self.status}>"
        )
