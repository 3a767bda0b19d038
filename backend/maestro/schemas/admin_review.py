# backend/maestro/schemas/admin_review.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class MentorApplicationCreate(StrictRequestModel):
    instrument: str = Field(..., min_length=1, max_length=100)
    experience: Optional[str] = None
    motivation: Optional[str] = None


class MentorApplicationResponse(StrictModel):
    id: int
    user_id: int
    instrument: str
    experience: Optional[str] = None
    motivation: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class MasterRoleRequestCreate(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=2000)


class MasterRoleRequestResponse(StrictModel):
    id: int
    mentor_id: int
    reason: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
