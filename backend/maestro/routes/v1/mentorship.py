# backend/maestro/routes/v1/mentorship.py
"""
Mentorship routes

``router`` is mounted under /mentorship-requests:
    POST  /                                  → Open a request to a mentor
    GET   /                                  → Caller's requests (as student or as mentor)
    GET   /{request_id}                      → One request (participants, admins)
    PATCH /{request_id}/status               → accepted / rejected (mentor) or cancelled (student)
    GET   /{request_id}/conversations        → Conversation history
    POST  /{request_id}/conversations        → Send a message
    PATCH /conversations/{message_id}/read   → Mark a message read

``sessions_router`` is mounted under /mentorship-sessions.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_caller, get_mentorship_service
from ...core.enums import MentorshipRequestStatus
from ...principal import CallerContext
from ...schemas.mentorship import (
    ConversationMessageCreate,
    ConversationMessageResponse,
    MentorshipRequestCreate,
    MentorshipRequestResponse,
    MentorshipRequestStatusUpdate,
    MentorshipSessionCreate,
    MentorshipSessionResponse,
    SessionCompleteRequest,
)
from ...services.mentorship_service import MentorshipService

router = APIRouter(tags=["mentorship"])
sessions_router = APIRouter(tags=["mentorship-sessions"])


@router.post("", response_model=MentorshipRequestResponse, status_code=status.HTTP_201_CREATED)
def create_mentorship_request(
    payload: MentorshipRequestCreate,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> MentorshipRequestResponse:
    return service.create_request(caller, payload.mentor_id, payload.message)


@router.get("", response_model=List[MentorshipRequestResponse])
def list_mentorship_requests(
    status_filter: Optional[MentorshipRequestStatus] = None,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> List[MentorshipRequestResponse]:
    if caller.is_mentor:
        return service.list_requests_for_mentor(caller.user_id, status_filter)
    return service.list_requests_for_student(caller.user_id)


@router.get("/{request_id}", response_model=MentorshipRequestResponse)
def get_mentorship_request(
    request_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> MentorshipRequestResponse:
    return service.get_request(caller, request_id)


@router.patch("/{request_id}/status", response_model=MentorshipRequestResponse)
def update_mentorship_request_status(
    request_id: int,
    payload: MentorshipRequestStatusUpdate,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> MentorshipRequestResponse:
    if payload.status == MentorshipRequestStatus.CANCELLED.value:
        return service.cancel_request(caller, request_id)
    return service.respond_to_request(
        caller, request_id, MentorshipRequestStatus(payload.status), payload.mentor_response
    )


@router.get("/{request_id}/conversations", response_model=List[ConversationMessageResponse])
def list_conversation(
    request_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> List[ConversationMessageResponse]:
    return service.list_messages(caller, request_id)


@router.post(
    "/{request_id}/conversations",
    response_model=ConversationMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def send_conversation_message(
    request_id: int,
    payload: ConversationMessageCreate,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> ConversationMessageResponse:
    return service.send_message(caller, request_id, payload.message)


@router.patch("/conversations/{message_id}/read", response_model=ConversationMessageResponse)
def mark_conversation_message_read(
    message_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> ConversationMessageResponse:
    return service.mark_message_read(caller, message_id)


@sessions_router.post(
    "", response_model=MentorshipSessionResponse, status_code=status.HTTP_201_CREATED
)
def schedule_mentorship_session(
    payload: MentorshipSessionCreate,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> MentorshipSessionResponse:
    return service.schedule_session(
        caller,
        payload.mentorship_request_id,
        payload.title,
        payload.scheduled_at,
        duration_minutes=payload.duration_minutes,
        description=payload.description,
        meeting_link=payload.meeting_link,
    )


@sessions_router.get("", response_model=List[MentorshipSessionResponse])
def list_mentorship_sessions(
    mentorship_request_id: Optional[int] = None,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> List[MentorshipSessionResponse]:
    if mentorship_request_id is not None:
        service.get_request(caller, mentorship_request_id)
        return service.list_sessions_for_request(mentorship_request_id)
    if caller.is_mentor:
        return service.list_sessions_for_mentor(caller.user_id)
    return service.list_sessions_for_student(caller.user_id)


@sessions_router.post("/{session_id}/complete", response_model=MentorshipSessionResponse)
def complete_mentorship_session(
    session_id: int,
    payload: Optional[SessionCompleteRequest] = None,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> MentorshipSessionResponse:
    payload = payload or SessionCompleteRequest()
    return service.complete_session(
        caller,
        session_id,
        rating=payload.rating,
        feedback=payload.feedback,
        mentor_notes=payload.mentor_notes,
    )


@sessions_router.post("/{session_id}/cancel", response_model=MentorshipSessionResponse)
def cancel_mentorship_session(
    session_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> MentorshipSessionResponse:
    return service.cancel_session(caller, session_id)


@sessions_router.post("/{session_id}/no-show", response_model=MentorshipSessionResponse)
def mark_mentorship_session_no_show(
    session_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MentorshipService = Depends(get_mentorship_service),
) -> MentorshipSessionResponse:
    return service.mark_no_show(caller, session_id)
