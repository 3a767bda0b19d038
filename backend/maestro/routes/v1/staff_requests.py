# backend/maestro/routes/v1/staff_requests.py
"""
Staff and resignation request routes

Mounted twice in main: once under /staff-requests (``router``) and once
under /resignation-requests (``resignation_router``).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_caller, get_membership_service
from ...core.enums import ReviewStatus
from ...principal import CallerContext
from ...schemas.classroom import (
    ResignationRequestCreate,
    ResignationRequestResponse,
    StaffRequestCreate,
    StaffRequestResponse,
)
from ...schemas.common import ReviewDecisionRequest
from ...services.membership_service import MembershipService

router = APIRouter(tags=["staff-requests"])
resignation_router = APIRouter(tags=["resignation-requests"])


@router.post("", response_model=StaffRequestResponse, status_code=status.HTTP_201_CREATED)
def create_staff_request(
    payload: StaffRequestCreate,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> StaffRequestResponse:
    return service.request_staff(caller, payload.classroom_id, payload.message)


@router.get("", response_model=List[StaffRequestResponse])
def list_staff_requests(
    classroom_id: Optional[int] = None,
    status_filter: Optional[ReviewStatus] = None,
    mentor_id: Optional[int] = None,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> List[StaffRequestResponse]:
    return service.list_staff_requests(classroom_id, status_filter, mentor_id)


@router.patch("/{request_id}/status", response_model=StaffRequestResponse)
def review_staff_request(
    request_id: int,
    payload: ReviewDecisionRequest,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> StaffRequestResponse:
    return service.review_staff_request(caller, request_id, payload.decision, payload.notes)


@resignation_router.post(
    "", response_model=ResignationRequestResponse, status_code=status.HTTP_201_CREATED
)
def create_resignation_request(
    payload: ResignationRequestCreate,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> ResignationRequestResponse:
    return service.request_resignation(caller, payload.classroom_id, payload.reason)


@resignation_router.get("", response_model=List[ResignationRequestResponse])
def list_resignation_requests(
    classroom_id: Optional[int] = None,
    status_filter: Optional[ReviewStatus] = None,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> List[ResignationRequestResponse]:
    return service.list_resignation_requests(classroom_id, status_filter)


@resignation_router.patch("/{request_id}/status", response_model=ResignationRequestResponse)
def review_resignation_request(
    request_id: int,
    payload: ReviewDecisionRequest,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> ResignationRequestResponse:
    return service.review_resignation(caller, request_id, payload.decision, payload.notes)
