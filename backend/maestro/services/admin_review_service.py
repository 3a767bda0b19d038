# backend/maestro/services/admin_review_service.py
"""
Admin-reviewed role changes: students applying to become mentors, and
mentors asking for the master role that lets them own classrooms.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import ReviewDecision, ReviewStatus, UserRole
from ..core.exceptions import (
    DuplicateRequestException,
    ForbiddenException,
    InvalidTransitionException,
)
from ..models.review_request import MasterRoleRequest, MentorApplication
from ..principal import CallerContext
from ..repositories.factory import RepositoryFactory
from .base import BaseService, utcnow
from .review_workflow import ReviewWorkflow

logger = logging.getLogger(__name__)


class AdminReviewService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.mentor_applications = ReviewWorkflow(
            RepositoryFactory.create_review_request_repository(db, MentorApplication),
            "MentorApplication",
        )
        self.master_role_requests = ReviewWorkflow(
            RepositoryFactory.create_review_request_repository(db, MasterRoleRequest),
            "MasterRoleRequest",
        )

    # Mentor applications

    @BaseService.measure_operation("submit_mentor_application")
    def submit_mentor_application(
        self,
        caller: CallerContext,
        instrument: str,
        experience: Optional[str] = None,
        motivation: Optional[str] = None,
    ) -> MentorApplication:
        if not caller.is_student:
            raise ForbiddenException("Only students can apply to become mentors")

        with self.transaction():
            self.user_repository.lock_user(caller.user_id)
            if self.mentor_applications.repository.find_pending(user_id=caller.user_id):
                raise DuplicateRequestException(
                    "You already have a pending mentor application",
                    details={"user_id": caller.user_id},
                )
            application = self.mentor_applications.repository.create(
                user_id=caller.user_id,
                instrument=instrument,
                experience=experience,
                motivation=motivation,
                status=ReviewStatus.PENDING.value,
            )

        self.log_operation(
            "mentor_application_submitted", application_id=application.id, user_id=caller.user_id
        )
        return application

    @BaseService.measure_operation("review_mentor_application")
    def review_mentor_application(
        self,
        caller: CallerContext,
        application_id: int,
        decision: ReviewDecision,
        notes: Optional[str] = None,
    ) -> MentorApplication:
        """Approving an application turns the applicant into a mentor."""
        self.require_admin(caller, "review mentor applications")

        def on_approve(application: MentorApplication) -> None:
            self.user_repository.update(application.user_id, role=UserRole.MENTOR.value)

        with self.transaction():
            application = self.mentor_applications.review(
                application_id, decision, caller.user_id, notes, on_approve=on_approve
            )

        self.record_transition("MentorApplication", decision.resulting_status)
        return application

    def list_mentor_applications(
        self, status: Optional[ReviewStatus] = None, user_id: Optional[int] = None
    ) -> List[MentorApplication]:
        return self.mentor_applications.repository.list_filtered(status, user_id=user_id)

    # Master role

    @BaseService.measure_operation("request_master_role")
    def request_master_role(
        self, caller: CallerContext, reason: Optional[str] = None
    ) -> MasterRoleRequest:
        self.require_mentor(caller, "request the master role")
        if caller.is_master:
            raise InvalidTransitionException(
                "User", "master", ["mentor"], message="You already have the master role"
            )

        with self.transaction():
            self.user_repository.lock_user(caller.user_id)
            if self.master_role_requests.repository.find_pending(mentor_id=caller.user_id):
                raise DuplicateRequestException(
                    "You already have a pending master role request",
                    details={"mentor_id": caller.user_id},
                )
            request = self.master_role_requests.repository.create(
                mentor_id=caller.user_id,
                reason=reason,
                status=ReviewStatus.PENDING.value,
            )

        self.log_operation("master_role_requested", request_id=request.id, mentor_id=caller.user_id)
        return request

    @BaseService.measure_operation("review_master_role_request")
    def review_master_role_request(
        self,
        caller: CallerContext,
        request_id: int,
        decision: ReviewDecision,
        notes: Optional[str] = None,
    ) -> MasterRoleRequest:
        self.require_admin(caller, "review master role requests")

        def on_approve(request: MasterRoleRequest) -> None:
            self.user_repository.update(request.mentor_id, is_master=True)

        def decision_timestamp(status: ReviewStatus):
            field = "approved_at" if status == ReviewStatus.APPROVED else "rejected_at"
            return {field: utcnow()}

        with self.transaction():
            request = self.master_role_requests.review(
                request_id,
                decision,
                caller.user_id,
                notes,
                on_approve=on_approve,
                extra_fields=decision_timestamp,
            )

        self.record_transition("MasterRoleRequest", decision.resulting_status)
        logger.info(
            "Master role request reviewed",
            extra={
                "event": "master_role_reviewed",
                "request_id": request_id,
                "mentor_id": request.mentor_id,
                "status": decision.resulting_status.value,
            },
        )
        return request

    def list_master_role_requests(
        self, status: Optional[ReviewStatus] = None, mentor_id: Optional[int] = None
    ) -> List[MasterRoleRequest]:
        return self.master_role_requests.repository.list_filtered(status, mentor_id=mentor_id)
