# backend/maestro/routes/v1/courses.py
"""
Course routes

All transitions are POSTs on the course: /submit, /approve, /reject,
/publish and /archive. DELETE soft-deletes and returns the hidden course.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_caller, get_course_service
from ...core.enums import CourseStatus
from ...principal import CallerContext
from ...schemas.course import CourseCreate, CourseResponse, CourseReviewRequest, CourseUpdate
from ...services.course_workflow_service import CourseWorkflowService

router = APIRouter(tags=["courses"])


@router.get("", response_model=List[CourseResponse])
def list_courses(
    status_filter: Optional[CourseStatus] = None,
    mentor_id: Optional[int] = None,
    service: CourseWorkflowService = Depends(get_course_service),
) -> List[CourseResponse]:
    return service.list_courses(status=status_filter, mentor_id=mentor_id)


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    return service.create_course(caller, payload)


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: int,
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    return service.get_course(course_id)


@router.patch("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    return service.update_course(caller, course_id, payload)


@router.post("/{course_id}/submit", response_model=CourseResponse)
def submit_course(
    course_id: int,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    return service.submit(caller, course_id)


@router.post("/{course_id}/approve", response_model=CourseResponse)
def approve_course(
    course_id: int,
    payload: Optional[CourseReviewRequest] = None,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    notes = payload.admin_notes if payload is not None else None
    return service.approve(caller, course_id, notes)


@router.post("/{course_id}/reject", response_model=CourseResponse)
def reject_course(
    course_id: int,
    payload: Optional[CourseReviewRequest] = None,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    notes = payload.admin_notes if payload is not None else None
    return service.reject(caller, course_id, notes)


@router.post("/{course_id}/publish", response_model=CourseResponse)
def publish_course(
    course_id: int,
    payload: Optional[CourseReviewRequest] = None,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    notes = payload.admin_notes if payload is not None else None
    return service.publish(caller, course_id, notes)


@router.post("/{course_id}/archive", response_model=CourseResponse)
def archive_course(
    course_id: int,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    return service.archive(caller, course_id)


@router.delete("/{course_id}", response_model=CourseResponse)
def delete_course(
    course_id: int,
    caller: CallerContext = Depends(get_caller),
    service: CourseWorkflowService = Depends(get_course_service),
) -> CourseResponse:
    return service.delete(caller, course_id)
