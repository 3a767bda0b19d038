# backend/maestro/schemas/common.py
from typing import Optional

from pydantic import Field

from ..core.enums import ReviewDecision
from ._strict_base import StrictModel, StrictRequestModel


class ReviewDecisionRequest(StrictRequestModel):
    """Body of every PATCH .../{id}/status review endpoint."""

    decision: ReviewDecision
    notes: Optional[str] = Field(None, max_length=2000)


class ErrorResponse(StrictModel):
    error: str
    message: str
    details: Optional[dict] = None
