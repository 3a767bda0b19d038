# backend/maestro/routes/v1/classrooms.py
"""
Classroom routes

Endpoints:
    GET    /                               → List public classrooms
    POST   /                               → Create a classroom (master mentors, admins)
    GET    /{classroom_id}                 → Classroom details
    GET    /{classroom_id}/members         → List memberships
    POST   /{classroom_id}/join            → Request to join as a student
    PATCH  /memberships/{membership_id}/status → Approve or reject a pending membership
    DELETE /memberships/{membership_id}    → Remove an active member
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_caller, get_membership_service
from ...core.enums import MembershipStatus
from ...principal import CallerContext
from ...schemas.classroom import (
    ClassroomCreate,
    ClassroomResponse,
    JoinRequest,
    MembershipResponse,
    MembershipReviewRequest,
)
from ...services.membership_service import MembershipService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["classrooms"])


@router.get("", response_model=List[ClassroomResponse])
def list_classrooms(
    service: MembershipService = Depends(get_membership_service),
) -> List[ClassroomResponse]:
    return service.list_public_classrooms()


@router.post("", response_model=ClassroomResponse, status_code=status.HTTP_201_CREATED)
def create_classroom(
    payload: ClassroomCreate,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> ClassroomResponse:
    return service.create_classroom(caller, payload)


@router.get("/{classroom_id}", response_model=ClassroomResponse)
def get_classroom(
    classroom_id: int,
    service: MembershipService = Depends(get_membership_service),
) -> ClassroomResponse:
    return service.get_classroom(classroom_id)


@router.get("/{classroom_id}/members", response_model=List[MembershipResponse])
def list_members(
    classroom_id: int,
    status_filter: Optional[MembershipStatus] = None,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> List[MembershipResponse]:
    return service.list_memberships(classroom_id, status_filter)


@router.post(
    "/{classroom_id}/join",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
)
def join_classroom(
    classroom_id: int,
    payload: Optional[JoinRequest] = None,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> MembershipResponse:
    message = payload.message if payload is not None else None
    return service.request_join(caller, classroom_id, message)


@router.patch("/memberships/{membership_id}/status", response_model=MembershipResponse)
def review_membership(
    membership_id: int,
    payload: MembershipReviewRequest,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> MembershipResponse:
    return service.review_membership(caller, membership_id, payload.decision)


@router.delete("/memberships/{membership_id}", response_model=MembershipResponse)
def remove_member(
    membership_id: int,
    caller: CallerContext = Depends(get_caller),
    service: MembershipService = Depends(get_membership_service),
) -> MembershipResponse:
    return service.remove_member(caller, membership_id)
