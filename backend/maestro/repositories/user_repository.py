# backend/maestro/repositories/user_repository.py
"""User data access, including the per-user row lock that serializes check-then-insert flows."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def lock_user(self, user_id: int) -> Optional[User]:
        """
        Lock a user's row for the rest of the transaction.

        Flows that check for a conflicting row and then insert one take this
        lock on the user the rows belong to first: an instructor's schedules
        and sessions, or a requester's pending requests. Two concurrent calls
        for the same user then run one after the other. SQLite has no row
        locks; its single writer lock gives the same ordering.
        """
        with self._errors("lock"):
            return (
                self.db.query(User)
                .filter(User.id == user_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
