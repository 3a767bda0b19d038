# backend/maestro/core/exceptions.py
"""
Domain-specific exceptions for the Maestro academy platform.

Workflow services raise these for expected business conditions (duplicate
request, scheduling conflict, wrong state). Each exception knows the HTTP
status it maps to; the API layer converts them in one place.
"""

from typing import Any, Dict, Iterable, Optional

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_response_body(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class ValidationException(DomainException):
    """Raised when input fails business validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class UnauthorizedException(DomainException):
    """Raised when the caller could not be identified."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class ForbiddenException(DomainException):
    """Raised when the caller lacks the required role or ownership."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class CapacityExceededException(DomainException):
    """Raised when a classroom or session is full."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CAPACITY_EXCEEDED"

    def __init__(self, capacity: int, current: int, message: Optional[str] = None):
        super().__init__(
            message=message or f"Capacity of {capacity} reached",
            details={"capacity": capacity, "current": current},
        )


class DuplicateRequestException(DomainException):
    """Raised when a uniqueness invariant would be violated."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "DUPLICATE_REQUEST"


class AlreadyMemberException(DuplicateRequestException):
    default_code = "ALREADY_MEMBER"

    def __init__(self, user_id: int, classroom_id: int):
        super().__init__(
            message="User is already an active member of this classroom",
            details={"user_id": user_id, "classroom_id": classroom_id},
        )


class InvalidTransitionException(DomainException):
    """Raised when a state-machine precondition does not hold."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_TRANSITION"

    def __init__(
        self,
        entity: str,
        current: Optional[str],
        required: Iterable[str],
        message: Optional[str] = None,
    ):
        required_list = [str(getattr(s, "value", s)) for s in required]
        current_value = getattr(current, "value", current)
        super().__init__(
            message=message
            or (
                f"{entity} must be in state {' or '.join(required_list)} "
                f"(current: {current_value})"
            ),
            details={"entity": entity, "current": current_value, "required": required_list},
        )


class AlreadyReviewedException(InvalidTransitionException):
    """Raised when a reviewable request has already been decided."""

    default_code = "ALREADY_REVIEWED"

    def __init__(self, entity: str, request_id: int, current: Optional[str] = None):
        super().__init__(
            entity,
            current,
            ["pending"],
            message=f"{entity} {request_id} has already been reviewed",
        )


class AlreadyRespondedException(InvalidTransitionException):
    """Raised when a mentorship request has already been answered."""

    default_code = "ALREADY_RESPONDED"

    def __init__(self, request_id: int, current: Optional[str] = None):
        super().__init__(
            "MentorshipRequest",
            current,
            ["pending"],
            message=f"Mentorship request {request_id} has already been responded to",
        )


class SchedulingConflictException(DomainException):
    """Raised when a time slot overlaps an instructor's existing commitment."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "SCHEDULING_CONFLICT"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "Instructor has a scheduling conflict at this time",
            details=details or {},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access fails, such as connection issues, query failures,
    or constraint violations that the service layer did not anticipate.
    """


class ServiceException(DomainException):
    """Raised when a service operation fails for reasons the caller cannot fix."""

    default_code = "INTERNAL_ERROR"
