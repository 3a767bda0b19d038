# backend/maestro/routes/v1/admin_reviews.py
"""
Mentor application and master role request routes

``mentor_applications_router`` is mounted under /mentor-applications and
``master_role_router`` under /master-role-requests.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_admin_review_service, get_caller
from ...core.enums import ReviewStatus
from ...principal import CallerContext
from ...schemas.admin_review import (
    MasterRoleRequestCreate,
    MasterRoleRequestResponse,
    MentorApplicationCreate,
    MentorApplicationResponse,
)
from ...schemas.common import ReviewDecisionRequest
from ...services.admin_review_service import AdminReviewService

mentor_applications_router = APIRouter(tags=["mentor-applications"])
master_role_router = APIRouter(tags=["master-role-requests"])


@mentor_applications_router.post(
    "", response_model=MentorApplicationResponse, status_code=status.HTTP_201_CREATED
)
def submit_mentor_application(
    payload: MentorApplicationCreate,
    caller: CallerContext = Depends(get_caller),
    service: AdminReviewService = Depends(get_admin_review_service),
) -> MentorApplicationResponse:
    return service.submit_mentor_application(
        caller, payload.instrument, payload.experience, payload.motivation
    )


@mentor_applications_router.get("", response_model=List[MentorApplicationResponse])
def list_mentor_applications(
    status_filter: Optional[ReviewStatus] = None,
    caller: CallerContext = Depends(get_caller),
    service: AdminReviewService = Depends(get_admin_review_service),
) -> List[MentorApplicationResponse]:
    service.require_admin(caller, "list mentor applications")
    return service.list_mentor_applications(status_filter)


@mentor_applications_router.patch("/{application_id}/status", response_model=MentorApplicationResponse)
def review_mentor_application(
    application_id: int,
    payload: ReviewDecisionRequest,
    caller: CallerContext = Depends(get_caller),
    service: AdminReviewService = Depends(get_admin_review_service),
) -> MentorApplicationResponse:
    return service.review_mentor_application(
        caller, application_id, payload.decision, payload.notes
    )


@master_role_router.post(
    "", response_model=MasterRoleRequestResponse, status_code=status.HTTP_201_CREATED
)
def request_master_role(
    payload: MasterRoleRequestCreate,
    caller: CallerContext = Depends(get_caller),
    service: AdminReviewService = Depends(get_admin_review_service),
) -> MasterRoleRequestResponse:
    return service.request_master_role(caller, payload.reason)


@master_role_router.get("", response_model=List[MasterRoleRequestResponse])
def list_master_role_requests(
    status_filter: Optional[ReviewStatus] = None,
    caller: CallerContext = Depends(get_caller),
    service: AdminReviewService = Depends(get_admin_review_service),
) -> List[MasterRoleRequestResponse]:
    service.require_admin(caller, "list master role requests")
    return service.list_master_role_requests(status_filter)


@master_role_router.patch("/{request_id}/status", response_model=MasterRoleRequestResponse)
def review_master_role_request(
    request_id: int,
    payload: ReviewDecisionRequest,
    caller: CallerContext = Depends(get_caller),
    service: AdminReviewService = Depends(get_admin_review_service),
) -> MasterRoleRequestResponse:
    return service.review_master_role_request(caller, request_id, payload.decision, payload.notes)
