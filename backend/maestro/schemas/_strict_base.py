"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs read straight off ORM rows."""

    model_config = ConfigDict(extra="forbid", from_attributes=True, use_enum_values=True)


class StrictRequestModel(BaseModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)
