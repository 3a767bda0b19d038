# backend/maestro/schemas/schedule.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class AvailabilityCheckRequest(StrictRequestModel):
    instructor_id: int
    day_of_week: int
    start_time: str
    end_time: str
    exclude_schedule_id: Optional[int] = None


class AvailabilityCheckResponse(StrictModel):
    available: bool


class ScheduleCreate(StrictRequestModel):
    """Times are zero-padded 24-hour ``HH:MM`` strings; format is checked by the service."""

    classroom_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    day_of_week: int
    start_time: str
    end_time: str
    instructor_id: int
    max_students: Optional[int] = Field(None, gt=0)


class ScheduleUpdate(StrictRequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    day_of_week: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    max_students: Optional[int] = Field(None, gt=0)


class ScheduleResponse(StrictModel):
    id: int
    classroom_id: int
    title: str
    description: Optional[str] = None
    day_of_week: int
    start_time: str
    end_time: str
    instructor_id: int
    max_students: int
    is_active: bool
    created_at: Optional[datetime] = None


class EnrollmentCreate(StrictRequestModel):
    """Leave ``student_id`` out to enroll the caller."""

    student_id: Optional[int] = None


class ScheduleEnrollmentResponse(StrictModel):
    id: int
    schedule_id: int
    student_id: int
    status: str
    enrolled_at: Optional[datetime] = None
    unenrolled_at: Optional[datetime] = None
