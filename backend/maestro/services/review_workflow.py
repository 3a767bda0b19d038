# backend/maestro/services/review_workflow.py
"""
Shared pending -> approved | rejected review step.

Every reviewable request type (staff, resignation, master role, mentor
application) is decided the same way; only authorization and the approval
side effect differ, and those are passed in by the owning service.

The status change is a single conditional UPDATE guarded on ``pending``.
If it affects no row, somebody else decided the request first and the caller
gets AlreadyReviewedException; the first decision stands.
"""

import logging
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from ..core.enums import ReviewDecision, ReviewStatus
from ..core.exceptions import AlreadyReviewedException, NotFoundException
from ..models.review_request import ReviewableRequestMixin
from ..repositories.review_request_repository import ReviewRequestRepository
from .base import utcnow

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ReviewableRequestMixin)

Hook = Callable[[R], None]


class ReviewWorkflow(Generic[R]):
    def __init__(self, repository: ReviewRequestRepository[R], entity_name: str):
        self.repository = repository
        self.entity_name = entity_name

    def get_or_404(self, request_id: int) -> R:
        request = self.repository.get_by_id(request_id)
        if request is None:
            raise NotFoundException(
                f"{self.entity_name} {request_id} not found",
                details={"entity": self.entity_name, "id": request_id},
            )
        return request

    def review(
        self,
        request_id: int,
        decision: ReviewDecision,
        reviewer_id: int,
        notes: Optional[str] = None,
        *,
        authorize: Optional[Hook] = None,
        validate_approval: Optional[Hook] = None,
        on_approve: Optional[Hook] = None,
        extra_fields: Optional[Callable[[ReviewStatus], Dict[str, Any]]] = None,
    ) -> R:
        """
        Decide a pending request. Must run inside the caller's transaction.

        Args:
            authorize: raises if the reviewer may not decide this request
            validate_approval: raises if approval would break an invariant;
                runs before anything is written
            on_approve: entity-specific side effect, runs after the status flip
            extra_fields: extra columns to write alongside the new status
        """
        request = self.get_or_404(request_id)
        if authorize is not None:
            authorize(request)

        if request.status != ReviewStatus.PENDING:
            raise AlreadyReviewedException(self.entity_name, request_id, request.status)

        target = decision.resulting_status
        if target == ReviewStatus.APPROVED and validate_approval is not None:
            validate_approval(request)

        fields: Dict[str, Any] = {"reviewed_by": reviewer_id, "reviewed_at": utcnow()}
        if notes is not None:
            fields["admin_notes"] = notes
        if extra_fields is not None:
            fields.update(extra_fields(target))

        if not self.repository.transition_status(
            request_id, [ReviewStatus.PENDING], target, **fields
        ):
            # Lost the race to a concurrent reviewer
            raise AlreadyReviewedException(self.entity_name, request_id)

        if target == ReviewStatus.APPROVED and on_approve is not None:
            on_approve(request)

        logger.info(
            f"{self.entity_name} reviewed",
            extra={
                "event": "request_reviewed",
                "entity": self.entity_name,
                "request_id": request_id,
                "status": target.value,
                "reviewed_by": reviewer_id,
            },
        )
        return request
