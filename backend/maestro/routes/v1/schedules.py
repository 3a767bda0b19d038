# backend/maestro/routes/v1/schedules.py
"""
Schedule routes

Endpoints:
    POST   /check-availability  → Is the instructor free for a slot?
    GET    /                    → List active schedules (filter by classroom, instructor, day)
    POST   /                    → Create a schedule
    PATCH  /{schedule_id}       → Update a schedule
    DELETE /{schedule_id}       → Deactivate a schedule

    GET    /{schedule_id}/enrollments               → Students enrolled in a schedule
    POST   /{schedule_id}/enrollments               → Enroll the caller or a named student
    DELETE /{schedule_id}/enrollments/{student_id}  → Unenroll a student
    GET    /students/{student_id}/enrollments       → A student's active schedules
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_caller, get_schedule_service
from ...principal import CallerContext
from ...schemas.schedule import (
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    EnrollmentCreate,
    ScheduleCreate,
    ScheduleEnrollmentResponse,
    ScheduleResponse,
    ScheduleUpdate,
)
from ...services.schedule_service import ScheduleService

router = APIRouter(tags=["schedules"])


@router.post("/check-availability", response_model=AvailabilityCheckResponse)
def check_availability(
    payload: AvailabilityCheckRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> AvailabilityCheckResponse:
    available = service.check_availability(
        payload.instructor_id,
        payload.day_of_week,
        payload.start_time,
        payload.end_time,
        exclude_schedule_id=payload.exclude_schedule_id,
    )
    return AvailabilityCheckResponse(available=available)


@router.get("", response_model=List[ScheduleResponse])
def list_schedules(
    classroom_id: Optional[int] = None,
    instructor_id: Optional[int] = None,
    day_of_week: Optional[int] = None,
    service: ScheduleService = Depends(get_schedule_service),
) -> List[ScheduleResponse]:
    return service.list_schedules(classroom_id, instructor_id, day_of_week)


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    caller: CallerContext = Depends(get_caller),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    return service.create_schedule(caller, **payload.model_dump())


@router.patch("/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    caller: CallerContext = Depends(get_caller),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    return service.update_schedule(caller, schedule_id, **payload.model_dump(exclude_unset=True))


@router.delete("/{schedule_id}", response_model=ScheduleResponse)
def deactivate_schedule(
    schedule_id: int,
    caller: CallerContext = Depends(get_caller),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    return service.deactivate_schedule(caller, schedule_id)


@router.get("/students/{student_id}/enrollments", response_model=List[ScheduleEnrollmentResponse])
def list_student_schedules(
    student_id: int,
    service: ScheduleService = Depends(get_schedule_service),
) -> List[ScheduleEnrollmentResponse]:
    return service.list_student_schedules(student_id)


@router.get("/{schedule_id}/enrollments", response_model=List[ScheduleEnrollmentResponse])
def list_enrollments(
    schedule_id: int,
    service: ScheduleService = Depends(get_schedule_service),
) -> List[ScheduleEnrollmentResponse]:
    return service.list_enrollments(schedule_id)


@router.post(
    "/{schedule_id}/enrollments",
    response_model=ScheduleEnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def enroll_student(
    schedule_id: int,
    payload: Optional[EnrollmentCreate] = None,
    caller: CallerContext = Depends(get_caller),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleEnrollmentResponse:
    student_id = payload.student_id if payload is not None else None
    return service.enroll_student(caller, schedule_id, student_id)


@router.delete(
    "/{schedule_id}/enrollments/{student_id}", response_model=ScheduleEnrollmentResponse
)
def unenroll_student(
    schedule_id: int,
    student_id: int,
    caller: CallerContext = Depends(get_caller),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleEnrollmentResponse:
    return service.unenroll_student(caller, schedule_id, student_id)
