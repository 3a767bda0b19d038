# backend/maestro/api/dependencies/database.py
"""
Request-scoped database session.

Routes and the service factories depend on this ``get_db`` so the whole
request shares one session; the test suite overrides it with its own.
"""

from typing import Generator

from sqlalchemy.orm import Session

from ...database import get_db as session_scope


def get_db() -> Generator[Session, None, None]:
    """Yield the request's session; it is committed or rolled back when the request ends."""
    yield from session_scope()
