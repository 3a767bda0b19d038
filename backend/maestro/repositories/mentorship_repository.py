# backend/maestro/repositories/mentorship_repository.py
"""
Mentorship data access: requests, conversation messages and sessions.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import MentorshipRequestStatus, MentorshipSessionStatus
from ..core.exceptions import RepositoryException
from ..models.mentorship import MentorConversation, MentorshipRequest, MentorshipSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

OPEN_REQUEST_STATUSES = (MentorshipRequestStatus.PENDING.value, MentorshipRequestStatus.ACCEPTED.value)


class MentorshipRequestRepository(BaseRepository[MentorshipRequest]):
    def __init__(self, db: Session):
        super().__init__(db, MentorshipRequest)

    def find_open_between(self, student_id: int, mentor_id: int) -> Optional[MentorshipRequest]:
        """Return a pending or accepted request between the pair, if one exists."""
        try:
            return (
                self.db.query(MentorshipRequest)
                .filter(
                    MentorshipRequest.student_id == student_id,
                    MentorshipRequest.mentor_id == mentor_id,
                    MentorshipRequest.status.in_(OPEN_REQUEST_STATUSES),
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking open mentorship requests: {str(e)}")
            raise RepositoryException(f"Failed to check mentorship requests: {str(e)}")

    def list_for_student(self, student_id: int) -> List[MentorshipRequest]:
        query = (
            self._build_query()
            .filter(MentorshipRequest.student_id == student_id)
            .order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc())
        )
        return self._execute_query(query)

    def list_for_mentor(
        self, mentor_id: int, status: Optional[MentorshipRequestStatus] = None
    ) -> List[MentorshipRequest]:
        query = self._build_query().filter(MentorshipRequest.mentor_id == mentor_id)
        if status is not None:
            query = query.filter(MentorshipRequest.status == status.value)
        query = query.order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc())
        return self._execute_query(query)


class MentorConversationRepository(BaseRepository[MentorConversation]):
    def __init__(self, db: Session):
        super().__init__(db, MentorConversation)

    def list_for_request(self, mentorship_request_id: int) -> List[MentorConversation]:
        query = (
            self._build_query()
            .filter(MentorConversation.mentorship_request_id == mentorship_request_id)
            .order_by(MentorConversation.created_at, MentorConversation.id)
        )
        return self._execute_query(query)

    def mark_read(self, message_id: int, read_at: datetime) -> bool:
        """Flip is_read false -> true once. Returns False if it was already read."""
        try:
            result = self.db.execute(
                update(MentorConversation)
                .where(MentorConversation.id == message_id, MentorConversation.is_read.is_(False))
                .values(is_read=True, read_at=read_at)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking message {message_id} read: {str(e)}")
            raise RepositoryException(f"Failed to mark message read: {str(e)}")
        changed = (result.rowcount or 0) == 1
        if changed:
            self._refresh_identity(message_id)
        return changed


class MentorshipSessionRepository(BaseRepository[MentorshipSession]):
    def __init__(self, db: Session):
        super().__init__(db, MentorshipSession)

    def get_scheduled_for_mentor_before(
        self, mentor_id: int, before: datetime
    ) -> List[MentorshipSession]:
        """
        Scheduled sessions for a mentor that start before ``before``.

        These are the only sessions that can overlap a slot ending at ``before``;
        the caller finishes the overlap test against each session's end.
        """
        try:
            return (
                self.db.query(MentorshipSession)
                .filter(
                    MentorshipSession.mentor_id == mentor_id,
                    MentorshipSession.status == MentorshipSessionStatus.SCHEDULED.value,
                    MentorshipSession.scheduled_at < before,
                )
                .order_by(MentorshipSession.scheduled_at)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting sessions for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict sessions: {str(e)}")

    def list_for_request(self, mentorship_request_id: int) -> List[MentorshipSession]:
        query = (
            self._build_query()
            .filter(MentorshipSession.mentorship_request_id == mentorship_request_id)
            .order_by(MentorshipSession.scheduled_at)
        )
        return self._execute_query(query)

    def list_for_mentor(self, mentor_id: int) -> List[MentorshipSession]:
        query = (
            self._build_query()
            .filter(MentorshipSession.mentor_id == mentor_id)
            .order_by(MentorshipSession.scheduled_at)
        )
        return self._execute_query(query)

    def list_for_student(self, student_id: int) -> List[MentorshipSession]:
        query = (
            self._build_query()
            .join(MentorshipRequest, MentorshipSession.mentorship_request_id == MentorshipRequest.id)
            .filter(MentorshipRequest.student_id == student_id)
            .order_by(MentorshipSession.scheduled_at)
        )
        return self._execute_query(query)
