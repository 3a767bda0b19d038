# backend/maestro/schemas/course.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class CourseCreate(StrictRequestModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=50)
    level: str = Field(..., min_length=1, max_length=30)
    price: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)


class CourseUpdate(StrictRequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    level: Optional[str] = Field(None, min_length=1, max_length=30)
    price: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)


class CourseReviewRequest(StrictRequestModel):
    admin_notes: Optional[str] = Field(None, max_length=2000)


class CourseResponse(StrictModel):
    id: int
    mentor_id: int
    title: str
    description: Optional[str] = None
    category: str
    level: str
    price: Optional[Decimal] = None
    duration_minutes: Optional[int] = None
    status: str
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    resubmission_count: int
    published_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None
