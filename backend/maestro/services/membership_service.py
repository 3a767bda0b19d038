# backend/maestro/services/membership_service.py
"""
Membership Lifecycle Manager for the Maestro platform

Handles how users enter and leave classrooms:
- Creating a classroom together with its single master membership
- Student join requests and their review by classroom staff
- Staff requests from mentors and their review by the classroom master
- Resignation of staff mentors
- Removal of members

Membership state machine: pending -> active -> removed, pending -> removed.
Nothing leaves removed. Every status change is a conditional write so that
two reviewers racing on the same row cannot both succeed.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import MembershipRole, MembershipStatus, ReviewDecision, ReviewStatus
from ..core.exceptions import (
    AlreadyMemberException,
    CapacityExceededException,
    DuplicateRequestException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
)
from ..models.classroom import Classroom, ClassroomMembership
from ..models.review_request import ResignationRequest, StaffRequest
from ..principal import CallerContext
from ..repositories.factory import RepositoryFactory
from ..schemas.classroom import ClassroomCreate
from .base import BaseService, utcnow
from .review_workflow import ReviewWorkflow

logger = logging.getLogger(__name__)


class MembershipService(BaseService):
    """
    Service layer for classroom membership.

    Owns ClassroomMembership, StaffRequest and ResignationRequest rows.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.classroom_repository = RepositoryFactory.create_classroom_repository(db)
        self.membership_repository = RepositoryFactory.create_membership_repository(db)
        self.staff_requests = ReviewWorkflow(
            RepositoryFactory.create_review_request_repository(db, StaffRequest), "StaffRequest"
        )
        self.resignation_requests = ReviewWorkflow(
            RepositoryFactory.create_review_request_repository(db, ResignationRequest),
            "ResignationRequest",
        )

    # Classrooms

    @BaseService.measure_operation("create_classroom")
    def create_classroom(self, caller: CallerContext, data: ClassroomCreate) -> Classroom:
        """
        Create a classroom owned by the caller.

        The classroom and its active master membership are written in one
        transaction, so a classroom never exists without exactly one master.

        Raises:
            ForbiddenException: caller is neither an admin nor a master mentor
            DuplicateRequestException: custom_slug already taken
        """
        if not (caller.is_admin or (caller.is_mentor and caller.is_master)):
            raise ForbiddenException("Only master mentors or admins can create classrooms")

        with self.transaction():
            if data.custom_slug and self.classroom_repository.get_by_slug(data.custom_slug):
                raise DuplicateRequestException(
                    "Classroom slug is already taken", details={"custom_slug": data.custom_slug}
                )

            fields = data.model_dump()
            if fields.get("max_students") is None:
                fields["max_students"] = settings.default_classroom_capacity

            try:
                classroom = self.classroom_repository.create(master_id=caller.user_id, **fields)
                self.membership_repository.create(
                    user_id=caller.user_id,
                    classroom_id=classroom.id,
                    role=MembershipRole.MASTER.value,
                    status=MembershipStatus.ACTIVE.value,
                )
            except IntegrityError:
                raise DuplicateRequestException(
                    "Classroom slug is already taken", details={"custom_slug": data.custom_slug}
                )

        self.log_operation(
            "classroom_created", classroom_id=classroom.id, master_id=caller.user_id
        )
        return classroom

    def get_classroom(self, classroom_id: int) -> Classroom:
        classroom = self.classroom_repository.get_active(classroom_id)
        if classroom is None:
            raise NotFoundException(f"Classroom {classroom_id} not found")
        return classroom

    def list_public_classrooms(self) -> List[Classroom]:
        return self.classroom_repository.list_public()

    # Student memberships

    @BaseService.measure_operation("request_join")
    def request_join(
        self, caller: CallerContext, classroom_id: int, message: Optional[str] = None
    ) -> ClassroomMembership:
        """
        Ask to join a classroom as a student.

        The classroom row is locked for the capacity check so that concurrent
        joins cannot overfill it.
        """
        with self.transaction():
            classroom = self.classroom_repository.get_active(classroom_id, for_update=True)
            if classroom is None:
                raise NotFoundException(f"Classroom {classroom_id} not found")

            self._ensure_capacity(classroom)

            existing = self.membership_repository.get_for_user(caller.user_id, classroom_id)
            if existing is not None:
                self._raise_for_existing_membership(existing, caller.user_id, classroom_id)

            try:
                membership = self.membership_repository.create(
                    user_id=caller.user_id,
                    classroom_id=classroom_id,
                    role=MembershipRole.STUDENT.value,
                    status=MembershipStatus.PENDING.value,
                    message=message,
                )
            except IntegrityError:
                raise DuplicateRequestException(
                    "A membership for this classroom already exists",
                    details={"user_id": caller.user_id, "classroom_id": classroom_id},
                )

        logger.info(
            "Join request created",
            extra={
                "event": "membership_join_requested",
                "membership_id": membership.id,
                "classroom_id": classroom_id,
                "user_id": caller.user_id,
                "master_id": classroom.master_id,
            },
        )
        return membership

    @BaseService.measure_operation("review_membership")
    def review_membership(
        self, caller: CallerContext, membership_id: int, decision: ReviewDecision
    ) -> ClassroomMembership:
        """
        Approve (pending -> active) or reject (pending -> removed) a membership.

        Student approvals re-check capacity because the classroom may have
        filled up since the request was made.
        """
        with self.transaction():
            membership = self._get_membership(membership_id)
            classroom = self.classroom_repository.get_by_id(
                membership.classroom_id, for_update=True
            )
            if not self._can_moderate(caller, classroom):
                raise ForbiddenException(
                    "Only the classroom master, its staff or an admin can review memberships"
                )

            if membership.status != MembershipStatus.PENDING:
                raise InvalidTransitionException(
                    "ClassroomMembership", membership.status, [MembershipStatus.PENDING]
                )

            now = utcnow()
            if decision == ReviewDecision.APPROVE:
                if membership.role == MembershipRole.STUDENT:
                    self._ensure_capacity(classroom)
                target = MembershipStatus.ACTIVE
                fields = {"reviewed_by": caller.user_id, "reviewed_at": now}
            else:
                target = MembershipStatus.REMOVED
                fields = {"reviewed_by": caller.user_id, "reviewed_at": now, "removed_at": now}

            if not self.membership_repository.transition_status(
                membership_id, [MembershipStatus.PENDING], target, **fields
            ):
                raise InvalidTransitionException(
                    "ClassroomMembership", None, [MembershipStatus.PENDING]
                )

        self.record_transition("ClassroomMembership", target)
        self.log_operation(
            "membership_reviewed",
            membership_id=membership_id,
            classroom_id=membership.classroom_id,
            status=target.value,
            reviewed_by=caller.user_id,
        )
        return membership

    @BaseService.measure_operation("remove_member")
    def remove_member(self, caller: CallerContext, membership_id: int) -> ClassroomMembership:
        with self.transaction():
            membership = self._get_membership(membership_id)
            classroom = self.classroom_repository.get_by_id(membership.classroom_id)
            if not (caller.is_admin or classroom.master_id == caller.user_id):
                raise ForbiddenException("Only the classroom master or an admin can remove members")
            if membership.role == MembershipRole.MASTER:
                raise ForbiddenException("The classroom master cannot be removed")

            if not self.membership_repository.transition_status(
                membership_id,
                [MembershipStatus.ACTIVE],
                MembershipStatus.REMOVED,
                removed_at=utcnow(),
            ):
                raise InvalidTransitionException(
                    "ClassroomMembership", membership.status, [MembershipStatus.ACTIVE]
                )

        self.record_transition("ClassroomMembership", MembershipStatus.REMOVED)
        self.log_operation(
            "member_removed",
            membership_id=membership_id,
            classroom_id=membership.classroom_id,
            removed_by=caller.user_id,
        )
        return membership

    def list_memberships(
        self, classroom_id: int, status: Optional[MembershipStatus] = None
    ) -> List[ClassroomMembership]:
        if self.classroom_repository.get_by_id(classroom_id) is None:
            raise NotFoundException(f"Classroom {classroom_id} not found")
        return self.membership_repository.list_for_classroom(classroom_id, status)

    # Staff requests

    @BaseService.measure_operation("request_staff")
    def request_staff(
        self, caller: CallerContext, classroom_id: int, message: Optional[str] = None
    ) -> StaffRequest:
        self.require_mentor(caller, "request to join a classroom as staff")

        with self.transaction():
            if self.classroom_repository.get_active(classroom_id) is None:
                raise NotFoundException(f"Classroom {classroom_id} not found")
            existing = self.membership_repository.get_for_user(caller.user_id, classroom_id)
            if existing is not None and existing.status != MembershipStatus.PENDING:
                self._raise_for_existing_membership(existing, caller.user_id, classroom_id)

            self.user_repository.lock_user(caller.user_id)
            if self.staff_requests.repository.find_pending(
                mentor_id=caller.user_id, classroom_id=classroom_id
            ):
                raise DuplicateRequestException(
                    "A pending staff request already exists for this classroom",
                    details={"mentor_id": caller.user_id, "classroom_id": classroom_id},
                )

            request = self.staff_requests.repository.create(
                mentor_id=caller.user_id,
                classroom_id=classroom_id,
                message=message,
                status=ReviewStatus.PENDING.value,
            )

        self.log_operation(
            "staff_requested",
            request_id=request.id,
            mentor_id=caller.user_id,
            classroom_id=classroom_id,
        )
        return request

    @BaseService.measure_operation("review_staff_request")
    def review_staff_request(
        self,
        caller: CallerContext,
        request_id: int,
        decision: ReviewDecision,
        notes: Optional[str] = None,
    ) -> StaffRequest:
        """
        Approve or reject a staff request.

        Approval creates an active staff membership, or promotes the mentor's
        pending row in that classroom. A mentor may be active staff in only one
        classroom at a time.
        """

        def authorize(request: StaffRequest) -> None:
            self._require_master_or_admin(caller, request.classroom_id, "review staff requests")

        def validate_approval(request: StaffRequest) -> None:
            existing = self.membership_repository.get_for_user(
                request.mentor_id, request.classroom_id
            )
            if existing is not None and existing.status != MembershipStatus.PENDING:
                self._raise_for_existing_membership(
                    existing, request.mentor_id, request.classroom_id
                )
            if self.membership_repository.get_active_staff_membership(request.mentor_id):
                raise DuplicateRequestException(
                    "Mentor can only be staff in one classroom at a time",
                    details={"mentor_id": request.mentor_id},
                )

        def on_approve(request: StaffRequest) -> None:
            self._activate_staff_membership(request, caller.user_id)

        with self.transaction():
            request = self.staff_requests.review(
                request_id,
                decision,
                caller.user_id,
                notes,
                authorize=authorize,
                validate_approval=validate_approval,
                on_approve=on_approve,
            )

        self.record_transition("StaffRequest", decision.resulting_status)
        logger.info(
            "Staff request reviewed",
            extra={
                "event": "staff_request_reviewed",
                "request_id": request_id,
                "classroom_id": request.classroom_id,
                "mentor_id": request.mentor_id,
                "status": decision.resulting_status.value,
            },
        )
        return request

    def list_staff_requests(
        self,
        classroom_id: Optional[int] = None,
        status: Optional[ReviewStatus] = None,
        mentor_id: Optional[int] = None,
    ) -> List[StaffRequest]:
        return self.staff_requests.repository.list_filtered(
            status, classroom_id=classroom_id, mentor_id=mentor_id
        )

    # Resignations

    @BaseService.measure_operation("request_resignation")
    def request_resignation(
        self, caller: CallerContext, classroom_id: int, reason: str
    ) -> ResignationRequest:
        with self.transaction():
            membership = self.membership_repository.get_for_user(caller.user_id, classroom_id)
            if (
                membership is None
                or membership.role != MembershipRole.STAFF
                or membership.status != MembershipStatus.ACTIVE
            ):
                raise InvalidTransitionException(
                    "ClassroomMembership",
                    membership.status if membership is not None else None,
                    [MembershipStatus.ACTIVE],
                    message="Only active staff members can resign from a classroom",
                )

            self.user_repository.lock_user(caller.user_id)
            if self.resignation_requests.repository.find_pending(
                mentor_id=caller.user_id, classroom_id=classroom_id
            ):
                raise DuplicateRequestException(
                    "A pending resignation request already exists for this classroom",
                    details={"mentor_id": caller.user_id, "classroom_id": classroom_id},
                )

            request = self.resignation_requests.repository.create(
                mentor_id=caller.user_id,
                classroom_id=classroom_id,
                reason=reason,
                status=ReviewStatus.PENDING.value,
            )

        self.log_operation(
            "resignation_requested",
            request_id=request.id,
            mentor_id=caller.user_id,
            classroom_id=classroom_id,
        )
        return request

    @BaseService.measure_operation("review_resignation")
    def review_resignation(
        self,
        caller: CallerContext,
        request_id: int,
        decision: ReviewDecision,
        notes: Optional[str] = None,
    ) -> ResignationRequest:
        def authorize(request: ResignationRequest) -> None:
            self._require_master_or_admin(caller, request.classroom_id, "review resignations")

        def on_approve(request: ResignationRequest) -> None:
            membership = self.membership_repository.get_active_for_user(
                request.mentor_id, request.classroom_id, MembershipRole.STAFF
            )
            if membership is None or not self.membership_repository.transition_status(
                membership.id,
                [MembershipStatus.ACTIVE],
                MembershipStatus.REMOVED,
                removed_at=utcnow(),
            ):
                raise InvalidTransitionException(
                    "ClassroomMembership",
                    None,
                    [MembershipStatus.ACTIVE],
                    message="Mentor is no longer active staff in this classroom",
                )

        with self.transaction():
            request = self.resignation_requests.review(
                request_id,
                decision,
                caller.user_id,
                notes,
                authorize=authorize,
                on_approve=on_approve,
            )

        self.record_transition("ResignationRequest", decision.resulting_status)
        return request

    def list_resignation_requests(
        self,
        classroom_id: Optional[int] = None,
        status: Optional[ReviewStatus] = None,
        mentor_id: Optional[int] = None,
    ) -> List[ResignationRequest]:
        return self.resignation_requests.repository.list_filtered(
            status, classroom_id=classroom_id, mentor_id=mentor_id
        )

    # Helpers

    def _get_membership(self, membership_id: int) -> ClassroomMembership:
        membership = self.membership_repository.get_by_id(membership_id)
        if membership is None:
            raise NotFoundException(f"Membership {membership_id} not found")
        return membership

    def _ensure_capacity(self, classroom: Classroom) -> None:
        current = self.membership_repository.count_active_students(classroom.id)
        if current >= classroom.max_students:
            raise CapacityExceededException(
                classroom.max_students, current, message="Classroom is full"
            )

    def _can_moderate(self, caller: CallerContext, classroom: Classroom) -> bool:
        if caller.is_admin or classroom.master_id == caller.user_id:
            return True
        return (
            self.membership_repository.get_active_for_user(
                caller.user_id, classroom.id, MembershipRole.STAFF
            )
            is not None
        )

    def _require_master_or_admin(
        self, caller: CallerContext, classroom_id: int, action: str
    ) -> None:
        if caller.is_admin:
            return
        classroom = self.classroom_repository.get_by_id(classroom_id)
        if classroom is None or classroom.master_id != caller.user_id:
            raise ForbiddenException(f"Only the classroom master or an admin can {action}")

    @staticmethod
    def _raise_for_existing_membership(
        membership: ClassroomMembership, user_id: int, classroom_id: int
    ) -> None:
        if membership.status == MembershipStatus.ACTIVE:
            raise AlreadyMemberException(user_id, classroom_id)
        if membership.status == MembershipStatus.PENDING:
            raise DuplicateRequestException(
                "A membership request for this classroom is already pending",
                details={"user_id": user_id, "classroom_id": classroom_id},
            )
        raise InvalidTransitionException(
            "ClassroomMembership",
            membership.status,
            [],
            message="A removed membership cannot be reinstated",
        )

    def _activate_staff_membership(self, request: StaffRequest, reviewer_id: int) -> None:
        now = utcnow()
        pending = self.membership_repository.get_for_user(request.mentor_id, request.classroom_id)
        if pending is None:
            try:
                self.membership_repository.create(
                    user_id=request.mentor_id,
                    classroom_id=request.classroom_id,
                    role=MembershipRole.STAFF.value,
                    status=MembershipStatus.ACTIVE.value,
                    reviewed_by=reviewer_id,
                    reviewed_at=now,
                )
            except IntegrityError:
                raise DuplicateRequestException(
                    "A membership for this classroom already exists",
                    details={"user_id": request.mentor_id, "classroom_id": request.classroom_id},
                )
            return

        if not self.membership_repository.transition_status(
            pending.id,
            [MembershipStatus.PENDING],
            MembershipStatus.ACTIVE,
            role=MembershipRole.STAFF.value,
            reviewed_by=reviewer_id,
            reviewed_at=now,
        ):
            raise InvalidTransitionException(
                "ClassroomMembership", None, [MembershipStatus.PENDING]
            )
