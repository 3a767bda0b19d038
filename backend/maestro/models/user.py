# backend/maestro/models/user.py
"""
User model for the Maestro academy platform.

Authentication lives outside this service; a user row only carries the
identity and role information the workflows need for authorization.
"""

import logging

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from ..core.enums import UserRole
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Platform account.

    Attributes:
        id: Numeric primary key, immutable once created
        role: student, mentor or admin; changed only by approval workflows
        is_master: Set when a mentor's master role request is approved
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.STUDENT, index=True)
    is_master = Column(Boolean, nullable=False, default=False)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_mentor(self) -> bool:
        return self.role == UserRole.MENTOR

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username} ({self.role})>"
