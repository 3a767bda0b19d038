# backend/maestro/repositories/base_repository.py
"""
Base Repository Pattern for the Maestro platform

Repositories own every query and write; services own the transaction. A
repository flushes so generated ids are available but never commits.

Status changes go through ``transition_status``, a single conditional UPDATE
guarded on the allowed source states. Its boolean result is how a workflow
learns that a competing writer got there first.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterable, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _status_value(value: Any) -> Any:
    return getattr(value, "value", value)


class BaseRepository(Generic[T]):
    """
    Generic data access for one model.

    Attributes:
        db: SQLAlchemy session shared with the owning service
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @contextmanager
    def _errors(self, action: str) -> Iterator[None]:
        """
        Wrap driver failures in RepositoryException.

        IntegrityError passes through untouched so services can turn a lost
        uniqueness race into the matching domain error.
        """
        try:
            yield
        except IntegrityError:
            self.logger.warning("Integrity error while trying to %s %s", action, self.model.__name__)
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to {action} {self.model.__name__}: {e}")
            raise RepositoryException(f"Failed to {action} {self.model.__name__}: {e}") from e

    def get_by_id(self, id: int, for_update: bool = False) -> Optional[T]:
        """
        Fetch one row by primary key.

        ``for_update`` takes a row lock on dialects that support it; SQLite
        ignores the clause and serializes writers with its database lock.
        """
        with self._errors("load"):
            query = self.db.query(self.model).filter(self.model.id == id)
            if for_update:
                query = query.with_for_update()
            return query.first()

    def create(self, **kwargs) -> T:
        with self._errors("create"):
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity

    def update(self, id: int, **kwargs) -> Optional[T]:
        """Set the given attributes on a row. Unknown attribute names are ignored."""
        entity = self.get_by_id(id)
        if entity is None:
            return None
        with self._errors("update"):
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
        return entity

    def transition_status(
        self,
        id: int,
        from_statuses: Iterable[Any],
        to_status: Any,
        **fields: Any,
    ) -> bool:
        """
        Move a row to ``to_status`` only if it is currently in ``from_statuses``.

        Issues ``UPDATE ... WHERE id = :id AND status IN (...)`` and returns
        True when exactly one row changed. False means the row is missing or
        another writer already moved it. Extra ``fields`` are written in the
        same statement.
        """
        sources = [_status_value(s) for s in from_statuses]
        statement = (
            update(self.model)
            .where(self.model.id == id, self.model.status.in_(sources))
            .values(status=_status_value(to_status), **fields)
            .execution_options(synchronize_session=False)
        )
        with self._errors("change status of"):
            result = self.db.execute(statement)

        changed = (result.rowcount or 0) == 1
        if changed:
            self._refresh_identity(id)
        return changed

    def count(self, **criteria) -> int:
        with self._errors("count"):
            return self.db.query(self.model).filter_by(**criteria).count()

    def find_by(self, **criteria) -> List[T]:
        """Exact-match lookup ordered by id."""
        with self._errors("find"):
            return self.db.query(self.model).filter_by(**criteria).order_by(self.model.id).all()

    def find_one_by(self, **criteria) -> Optional[T]:
        with self._errors("find"):
            return self.db.query(self.model).filter_by(**criteria).first()

    # Helpers for subclasses

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        with self._errors("query"):
            return query.all()

    def _refresh_identity(self, id: int) -> None:
        """Reload a cached instance after a bulk UPDATE so the next read sees new values."""
        self.db.get(self.model, id, populate_existing=True)
