# backend/maestro/services/mentorship_service.py
"""
Mentorship Workflow Engine for the Maestro platform

A student opens a mentorship request to a mentor. Once the mentor accepts,
the pair can exchange messages and schedule sessions. Sessions end as
completed, cancelled or no-show.

Request states: pending -> accepted | rejected | cancelled (all terminal).
Session states: scheduled -> completed | cancelled | no-show (all terminal).
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import MentorshipRequestStatus, MentorshipSessionStatus
from ..core.exceptions import (
    AlreadyRespondedException,
    DuplicateRequestException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    SchedulingConflictException,
    ValidationException,
)
from ..models.mentorship import MentorConversation, MentorshipRequest, MentorshipSession
from ..principal import CallerContext
from ..repositories.factory import RepositoryFactory
from .base import BaseService, utcnow

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (MentorshipRequestStatus.ACCEPTED, MentorshipRequestStatus.REJECTED)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MentorshipService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.request_repository = RepositoryFactory.create_mentorship_request_repository(db)
        self.conversation_repository = RepositoryFactory.create_conversation_repository(db)
        self.session_repository = RepositoryFactory.create_mentorship_session_repository(db)

    # Requests

    @BaseService.measure_operation("create_mentorship_request")
    def create_request(
        self, caller: CallerContext, mentor_id: int, message: str
    ) -> MentorshipRequest:
        """
        Open a mentorship request from the caller to a mentor.

        Raises:
            ValidationException: message shorter than the configured minimum
            NotFoundException: mentor does not exist or is not a mentor
            ForbiddenException: caller is requesting themselves
            DuplicateRequestException: a pending or accepted request already links the pair
        """
        text = (message or "").strip()
        min_length = settings.mentorship_message_min_length
        if len(text) < min_length:
            raise ValidationException(
                f"Message must be at least {min_length} characters",
                details={"field": "message", "min_length": min_length},
            )

        with self.transaction():
            mentor = self.user_repository.get_by_id(mentor_id)
            if mentor is None or not mentor.is_mentor:
                raise NotFoundException(f"Mentor {mentor_id} not found")
            if mentor_id == caller.user_id:
                raise ForbiddenException("You cannot request mentorship from yourself")

            self.user_repository.lock_user(caller.user_id)
            if self.request_repository.find_open_between(caller.user_id, mentor_id):
                raise DuplicateRequestException(
                    "An open mentorship request already exists with this mentor",
                    details={"student_id": caller.user_id, "mentor_id": mentor_id},
                )

            request = self.request_repository.create(
                student_id=caller.user_id,
                mentor_id=mentor_id,
                message=text,
                status=MentorshipRequestStatus.PENDING.value,
            )

        self.log_operation(
            "mentorship_requested",
            request_id=request.id,
            student_id=caller.user_id,
            mentor_id=mentor_id,
        )
        return request

    @BaseService.measure_operation("respond_to_mentorship_request")
    def respond_to_request(
        self,
        caller: CallerContext,
        request_id: int,
        decision: MentorshipRequestStatus,
        mentor_response: Optional[str] = None,
    ) -> MentorshipRequest:
        """Accept or reject a pending request. Only its mentor (or an admin) may answer."""
        if decision not in RESPONSE_STATUSES:
            raise ValidationException(
                "Decision must be accepted or rejected",
                details={"decision": getattr(decision, "value", decision)},
            )
        decision = MentorshipRequestStatus(decision)

        with self.transaction():
            request = self._get_request(request_id)
            if not (caller.is_admin or request.mentor_id == caller.user_id):
                raise ForbiddenException("Only the requested mentor can respond to this request")
            if request.status != MentorshipRequestStatus.PENDING:
                raise AlreadyRespondedException(request_id, request.status)

            timestamp_field = (
                "accepted_at" if decision == MentorshipRequestStatus.ACCEPTED else "rejected_at"
            )
            fields: Dict[str, Any] = {timestamp_field: utcnow()}
            if mentor_response is not None:
                fields["mentor_response"] = mentor_response

            if not self.request_repository.transition_status(
                request_id, [MentorshipRequestStatus.PENDING], decision, **fields
            ):
                raise AlreadyRespondedException(request_id)

        self.record_transition("MentorshipRequest", decision)
        logger.info(
            "Mentorship request answered",
            extra={
                "event": "mentorship_request_responded",
                "request_id": request_id,
                "status": decision.value,
                "mentor_id": request.mentor_id,
            },
        )
        return request

    @BaseService.measure_operation("cancel_mentorship_request")
    def cancel_request(self, caller: CallerContext, request_id: int) -> MentorshipRequest:
        with self.transaction():
            request = self._get_request(request_id)
            if request.student_id != caller.user_id:
                raise ForbiddenException("Only the requesting student can cancel this request")
            if not self.request_repository.transition_status(
                request_id,
                [MentorshipRequestStatus.PENDING],
                MentorshipRequestStatus.CANCELLED,
                cancelled_at=utcnow(),
            ):
                raise AlreadyRespondedException(request_id, request.status)

        self.record_transition("MentorshipRequest", MentorshipRequestStatus.CANCELLED)
        self.log_operation("mentorship_request_cancelled", request_id=request_id)
        return request

    def get_request(self, caller: CallerContext, request_id: int) -> MentorshipRequest:
        request = self._get_request(request_id)
        self._require_participant(caller, request, allow_admin=True)
        return request

    def list_requests_for_student(self, student_id: int) -> List[MentorshipRequest]:
        return self.request_repository.list_for_student(student_id)

    def list_requests_for_mentor(
        self, mentor_id: int, status: Optional[MentorshipRequestStatus] = None
    ) -> List[MentorshipRequest]:
        return self.request_repository.list_for_mentor(mentor_id, status)

    # Conversation

    @BaseService.measure_operation("send_mentorship_message")
    def send_message(
        self, caller: CallerContext, request_id: int, message: str
    ) -> MentorConversation:
        text = (message or "").strip()
        if not text:
            raise ValidationException("Message cannot be empty", details={"field": "message"})

        with self.transaction():
            request = self._get_request(request_id)
            self._require_accepted(request)
            self._require_participant(caller, request)
            entry = self.conversation_repository.create(
                mentorship_request_id=request_id,
                sender_id=caller.user_id,
                message=text,
                is_read=False,
            )

        return entry

    def list_messages(self, caller: CallerContext, request_id: int) -> List[MentorConversation]:
        request = self._get_request(request_id)
        self._require_participant(caller, request, allow_admin=True)
        return self.conversation_repository.list_for_request(request_id)

    @BaseService.measure_operation("mark_message_read")
    def mark_message_read(self, caller: CallerContext, message_id: int) -> MentorConversation:
        """Mark a message read. Marking an already-read message returns it unchanged."""
        with self.transaction():
            entry = self.conversation_repository.get_by_id(message_id)
            if entry is None:
                raise NotFoundException(f"Message {message_id} not found")
            request = self._get_request(entry.mentorship_request_id)
            self._require_participant(caller, request)
            self.conversation_repository.mark_read(message_id, utcnow())

        return entry

    # Sessions

    @BaseService.measure_operation("schedule_mentorship_session")
    def schedule_session(
        self,
        caller: CallerContext,
        request_id: int,
        title: str,
        scheduled_at: datetime,
        duration_minutes: Optional[int] = None,
        description: Optional[str] = None,
        meeting_link: Optional[str] = None,
    ) -> MentorshipSession:
        """
        Schedule a session under an accepted request.

        The mentor's user row is locked before the overlap check, so two
        bookings for the same mentor cannot both pass the check.

        Raises:
            InvalidTransitionException: request is not accepted
            ForbiddenException: caller is not the student or the mentor
            SchedulingConflictException: mentor already has an overlapping scheduled session
        """
        duration = (
            settings.default_session_minutes if duration_minutes is None else duration_minutes
        )
        if duration <= 0:
            raise ValidationException(
                "Session duration must be positive", details={"duration_minutes": duration}
            )
        start = as_utc(scheduled_at)
        end = start + timedelta(minutes=duration)

        with self.transaction():
            request = self._get_request(request_id)
            self._require_accepted(request)
            self._require_participant(caller, request)

            self.user_repository.lock_user(request.mentor_id)
            for existing in self.session_repository.get_scheduled_for_mentor_before(
                request.mentor_id, end
            ):
                if as_utc(existing.ends_at) > start:
                    raise SchedulingConflictException(
                        "Mentor already has a session at this time",
                        details={
                            "conflicting_session_id": existing.id,
                            "mentor_id": request.mentor_id,
                        },
                    )

            session = self.session_repository.create(
                mentorship_request_id=request_id,
                mentor_id=request.mentor_id,
                title=title,
                description=description,
                scheduled_at=start,
                duration_minutes=duration,
                meeting_link=meeting_link,
                status=MentorshipSessionStatus.SCHEDULED.value,
            )

        self.log_operation(
            "mentorship_session_scheduled",
            session_id=session.id,
            request_id=request_id,
            mentor_id=request.mentor_id,
        )
        return session

    @BaseService.measure_operation("complete_mentorship_session")
    def complete_session(
        self,
        caller: CallerContext,
        session_id: int,
        rating: Optional[int] = None,
        feedback: Optional[str] = None,
        mentor_notes: Optional[str] = None,
    ) -> MentorshipSession:
        if rating is not None and not 1 <= rating <= 5:
            raise ValidationException(
                "Rating must be between 1 and 5", details={"rating": rating}
            )
        fields: Dict[str, Any] = {"completed_at": utcnow()}
        if rating is not None:
            fields["rating"] = rating
        if feedback is not None:
            fields["session_feedback"] = feedback
        if mentor_notes is not None:
            fields["mentor_notes"] = mentor_notes
        return self._finish_session(caller, session_id, MentorshipSessionStatus.COMPLETED, fields)

    @BaseService.measure_operation("cancel_mentorship_session")
    def cancel_session(self, caller: CallerContext, session_id: int) -> MentorshipSession:
        return self._finish_session(
            caller, session_id, MentorshipSessionStatus.CANCELLED, {"cancelled_at": utcnow()}
        )

    @BaseService.measure_operation("mark_session_no_show")
    def mark_no_show(self, caller: CallerContext, session_id: int) -> MentorshipSession:
        return self._finish_session(caller, session_id, MentorshipSessionStatus.NO_SHOW, {})

    def list_sessions_for_request(self, request_id: int) -> List[MentorshipSession]:
        return self.session_repository.list_for_request(request_id)

    def list_sessions_for_mentor(self, mentor_id: int) -> List[MentorshipSession]:
        return self.session_repository.list_for_mentor(mentor_id)

    def list_sessions_for_student(self, student_id: int) -> List[MentorshipSession]:
        return self.session_repository.list_for_student(student_id)

    # Helpers

    def _finish_session(
        self,
        caller: CallerContext,
        session_id: int,
        target: MentorshipSessionStatus,
        fields: Dict[str, Any],
    ) -> MentorshipSession:
        with self.transaction():
            session = self.session_repository.get_by_id(session_id)
            if session is None:
                raise NotFoundException(f"Mentorship session {session_id} not found")
            request = self._get_request(session.mentorship_request_id)
            self._require_participant(caller, request, allow_admin=True)

            if not self.session_repository.transition_status(
                session_id, [MentorshipSessionStatus.SCHEDULED], target, **fields
            ):
                raise InvalidTransitionException(
                    "MentorshipSession", session.status, [MentorshipSessionStatus.SCHEDULED]
                )

        self.record_transition("MentorshipSession", target)
        self.log_operation(
            "mentorship_session_finished", session_id=session_id, status=target.value
        )
        return session

    def _get_request(self, request_id: int) -> MentorshipRequest:
        request = self.request_repository.get_by_id(request_id)
        if request is None:
            raise NotFoundException(f"Mentorship request {request_id} not found")
        return request

    @staticmethod
    def _require_accepted(request: MentorshipRequest) -> None:
        if request.status != MentorshipRequestStatus.ACCEPTED:
            raise InvalidTransitionException(
                "MentorshipRequest", request.status, [MentorshipRequestStatus.ACCEPTED]
            )

    @staticmethod
    def _require_participant(
        caller: CallerContext, request: MentorshipRequest, allow_admin: bool = False
    ) -> None:
        if allow_admin and caller.is_admin:
            return
        if not request.is_participant(caller.user_id):
            raise ForbiddenException("Only the student and mentor of this request can do this")
