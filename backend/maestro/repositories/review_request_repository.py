# backend/maestro/repositories/review_request_repository.py
"""
Generic repository for pending/approved/rejected request tables.

One class serves StaffRequest, ResignationRequest, MasterRoleRequest and
MentorApplication; the model is chosen at construction time.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import ReviewStatus
from ..core.exceptions import RepositoryException
from ..models.review_request import ReviewableRequestMixin
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ReviewableRequestMixin)


class ReviewRequestRepository(BaseRepository[R]):
    def __init__(self, db: Session, model: Type[R]):
        super().__init__(db, model)

    def find_pending(self, **criteria: Any) -> Optional[R]:
        return self.find_one_by(status=ReviewStatus.PENDING.value, **criteria)

    def list_filtered(
        self, status: Optional[ReviewStatus] = None, **criteria: Any
    ) -> List[R]:
        """List requests newest first, optionally filtered by status and exact-match columns."""
        filters: Dict[str, Any] = {k: v for k, v in criteria.items() if v is not None}
        if status is not None:
            filters["status"] = status.value
        try:
            return (
                self.db.query(self.model)
                .filter_by(**filters)
                .order_by(self.model.created_at.desc(), self.model.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to list {self.model.__name__}: {str(e)}")
