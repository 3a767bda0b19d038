# backend/maestro/schemas/classroom.py
"""Classroom, membership, staff and resignation request DTOs."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.enums import ReviewDecision
from ._strict_base import StrictModel, StrictRequestModel


class ClassroomCreate(StrictRequestModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    subject: str = Field(..., min_length=1, max_length=100)
    level: str = Field(..., min_length=1, max_length=50)
    academy_name: Optional[str] = Field(None, max_length=200)
    logo_url: Optional[str] = Field(None, max_length=500)
    primary_color: Optional[str] = Field(None, max_length=20)
    max_students: Optional[int] = Field(None, gt=0)
    is_public: bool = True
    custom_slug: Optional[str] = Field(None, min_length=1, max_length=100)


class ClassroomResponse(StrictModel):
    id: int
    master_id: int
    title: str
    description: Optional[str] = None
    subject: str
    level: str
    academy_name: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    max_students: int
    is_public: bool
    custom_slug: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class JoinRequest(StrictRequestModel):
    message: Optional[str] = Field(None, max_length=2000)


class MembershipReviewRequest(StrictRequestModel):
    decision: ReviewDecision


class MembershipResponse(StrictModel):
    id: int
    user_id: int
    classroom_id: int
    role: str
    status: str
    message: Optional[str] = None
    joined_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    removed_at: Optional[datetime] = None


class StaffRequestCreate(StrictRequestModel):
    classroom_id: int
    message: Optional[str] = Field(None, max_length=2000)


class StaffRequestResponse(StrictModel):
    id: int
    mentor_id: int
    classroom_id: int
    message: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ResignationRequestCreate(StrictRequestModel):
    classroom_id: int
    reason: str = Field(..., min_length=1, max_length=2000)


class ResignationRequestResponse(StrictModel):
    id: int
    mentor_id: int
    classroom_id: int
    reason: str
    status: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
