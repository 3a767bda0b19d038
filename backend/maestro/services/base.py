# backend/maestro/services/base.py
"""
Base Service Pattern for the Maestro platform

Everything a workflow service shares:
- one transaction per workflow operation (``transaction``)
- timing of public operations (``measure_operation``), kept in-process per
  service class and exported to Prometheus
- structured operation logging
- role guards over the explicit CallerContext
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ForbiddenException, ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import CallerContext

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class OperationStats:
    """Running timing totals for one service operation."""

    count: int = 0
    failures: int = 0
    total_time: float = 0.0
    min_time: float = float("inf")
    max_time: float = 0.0

    def add(self, elapsed: float, success: bool) -> None:
        self.count += 1
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)
        if not success:
            self.failures += 1

    def summary(self) -> Dict[str, Any]:
        successes = self.count - self.failures
        return {
            "count": self.count,
            "avg_time": self.total_time / self.count,
            "min_time": self.min_time,
            "max_time": self.max_time,
            "success_rate": successes / self.count,
            "success_count": successes,
            "failure_count": self.failures,
        }


class BaseService:
    """
    Base class for the workflow services.

    A service is built per request around that request's session. Repositories
    only flush; the service's ``transaction`` block is where work is committed.
    """

    # service class name -> operation name -> stats
    _class_metrics: Dict[str, Dict[str, OperationStats]] = {}

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit the enclosed work, or roll all of it back.

        Domain exceptions raised inside the block propagate unchanged after the
        rollback. Database failures are reported as ServiceException.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.error("Rolled back after database error: %s", e)
            raise ServiceException(f"Database operation failed: {e}") from e
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and record its outcome.

        Usage:
            @BaseService.measure_operation("review_staff_request")
            def review_staff_request(self, ...):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                started = time.perf_counter()
                error: Optional[BaseException] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error = e
                    raise
                finally:
                    self._observe(operation_name, time.perf_counter() - started, error)

            return cast(F, wrapper)

        return decorator

    def _observe(self, operation: str, elapsed: float, error: Optional[BaseException]) -> None:
        service_name = self.__class__.__name__
        stats = BaseService._class_metrics.setdefault(service_name, {}).setdefault(
            operation, OperationStats()
        )
        stats.add(elapsed, success=error is None)

        if elapsed > settings.slow_operation_seconds:
            self.logger.warning(f"Slow operation: {operation} took {elapsed:.2f}s")

        prometheus_metrics.record_service_operation(
            service=service_name,
            operation=operation,
            duration=elapsed,
            status="success" if error is None else "error",
            error_type=type(error).__name__ if error is not None else None,
        )

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log a workflow event with structured context."""
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def record_transition(self, entity: str, to_status: Any) -> None:
        prometheus_metrics.record_transition(entity, str(getattr(to_status, "value", to_status)))

    # Authorization helpers

    @staticmethod
    def require_admin(caller: CallerContext, action: str) -> None:
        if not caller.is_admin:
            raise ForbiddenException(f"Only admins can {action}")

    @staticmethod
    def require_mentor(caller: CallerContext, action: str) -> None:
        if not caller.is_mentor:
            raise ForbiddenException(f"Only mentors can {action}")

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation timing summary for this service class."""
        operations = BaseService._class_metrics.get(self.__class__.__name__, {})
        return {name: stats.summary() for name, stats in operations.items() if stats.count}

    def reset_metrics(self) -> None:
        BaseService._class_metrics.pop(self.__class__.__name__, None)
