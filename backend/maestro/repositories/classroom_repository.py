# backend/maestro/repositories/classroom_repository.py
"""
Classroom and ClassroomMembership repositories.

Membership rows are never deleted; every status change goes through
``transition_status`` so that competing reviewers cannot both win.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from ..core.enums import MembershipRole, MembershipStatus
from ..models.classroom import Classroom, ClassroomMembership
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ClassroomRepository(BaseRepository[Classroom]):
    def __init__(self, db: Session):
        super().__init__(db, Classroom)

    def get_active(self, classroom_id: int, for_update: bool = False) -> Optional[Classroom]:
        classroom = self.get_by_id(classroom_id, for_update=for_update)
        if classroom is None or not classroom.is_active:
            return None
        return classroom

    def get_by_slug(self, slug: str) -> Optional[Classroom]:
        return self.find_one_by(custom_slug=slug)

    def list_public(self) -> List[Classroom]:
        query = (
            self._build_query()
            .filter(Classroom.is_active.is_(True), Classroom.is_public.is_(True))
            .order_by(Classroom.id)
        )
        return self._execute_query(query)


class ClassroomMembershipRepository(BaseRepository[ClassroomMembership]):
    def __init__(self, db: Session):
        super().__init__(db, ClassroomMembership)

    def get_for_user(self, user_id: int, classroom_id: int) -> Optional[ClassroomMembership]:
        """Return the single membership row for (user, classroom), whatever its status."""
        return self.find_one_by(user_id=user_id, classroom_id=classroom_id)

    def get_active_for_user(
        self, user_id: int, classroom_id: int, role: Optional[MembershipRole] = None
    ) -> Optional[ClassroomMembership]:
        membership = self.get_for_user(user_id, classroom_id)
        if membership is None or membership.status != MembershipStatus.ACTIVE:
            return None
        if role is not None and membership.role != role:
            return None
        return membership

    def count_active_students(self, classroom_id: int) -> int:
        return self.count(
            classroom_id=classroom_id,
            role=MembershipRole.STUDENT.value,
            status=MembershipStatus.ACTIVE.value,
        )

    def count_active_masters(self, classroom_id: int) -> int:
        return self.count(
            classroom_id=classroom_id,
            role=MembershipRole.MASTER.value,
            status=MembershipStatus.ACTIVE.value,
        )

    def get_active_staff_membership(self, user_id: int) -> Optional[ClassroomMembership]:
        """Return the user's active staff membership in any classroom."""
        return self.find_one_by(
            user_id=user_id,
            role=MembershipRole.STAFF.value,
            status=MembershipStatus.ACTIVE.value,
        )

    def list_for_classroom(
        self, classroom_id: int, status: Optional[MembershipStatus] = None
    ) -> List[ClassroomMembership]:
        query = (
            self._build_query()
            .options(joinedload(ClassroomMembership.user))
            .filter(ClassroomMembership.classroom_id == classroom_id)
        )
        if status is not None:
            query = query.filter(ClassroomMembership.status == status.value)
        return self._execute_query(
            query.order_by(ClassroomMembership.joined_at.desc(), ClassroomMembership.id.desc())
        )
