# backend/maestro/api/dependencies/auth.py
"""
Caller identity dependency.

Authentication happens upstream; the serving layer forwards the
authenticated user as ``X-User-Id`` and ``X-User-Role`` headers. The user row
is loaded so that role and master status come from the database, and a role
header that disagrees with the stored role is rejected.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ...core.enums import UserRole
from ...core.exceptions import UnauthorizedException
from ...principal import CallerContext
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> CallerContext:
    if not x_user_id or not x_user_role:
        raise UnauthorizedException("Missing caller identity headers")

    try:
        user_id = int(x_user_id)
        role = UserRole(x_user_role.strip().lower())
    except ValueError:
        raise UnauthorizedException("Malformed caller identity headers")

    user = RepositoryFactory.create_user_repository(db).get_by_id(user_id)
    if user is None:
        raise UnauthorizedException("Unknown user")
    if user.role != role:
        logger.warning(
            "Role header does not match stored role",
            extra={"user_id": user_id, "header_role": role.value, "stored_role": user.role},
        )
        raise UnauthorizedException("Role does not match the authenticated user")

    return CallerContext.from_user(user)
