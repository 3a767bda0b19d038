# backend/maestro/schemas/mentorship.py
"""
Mentorship request, conversation and session DTOs.

Message length rules are enforced by MentorshipService so that the same
VALIDATION_ERROR is produced whether the call comes over HTTP or not.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class MentorshipRequestCreate(StrictRequestModel):
    mentor_id: int
    message: str = Field(..., max_length=5000)


class MentorshipRequestStatusUpdate(StrictRequestModel):
    status: Literal["accepted", "rejected", "cancelled"]
    mentor_response: Optional[str] = Field(None, max_length=5000)


class MentorshipRequestResponse(StrictModel):
    id: int
    student_id: int
    mentor_id: int
    message: str
    status: str
    mentor_response: Optional[str] = None
    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class ConversationMessageCreate(StrictRequestModel):
    message: str = Field(..., min_length=1, max_length=5000)


class ConversationMessageResponse(StrictModel):
    id: int
    mentorship_request_id: int
    sender_id: int
    message: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class MentorshipSessionCreate(StrictRequestModel):
    mentorship_request_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    scheduled_at: datetime
    duration_minutes: Optional[int] = Field(None, gt=0)
    meeting_link: Optional[str] = Field(None, max_length=500)


class SessionCompleteRequest(StrictRequestModel):
    rating: Optional[int] = None
    feedback: Optional[str] = Field(None, max_length=5000)
    mentor_notes: Optional[str] = Field(None, max_length=5000)


class MentorshipSessionResponse(StrictModel):
    id: int
    mentorship_request_id: int
    mentor_id: int
    title: str
    description: Optional[str] = None
    scheduled_at: datetime
    duration_minutes: int
    status: str
    meeting_link: Optional[str] = None
    rating: Optional[int] = None
    session_feedback: Optional[str] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
