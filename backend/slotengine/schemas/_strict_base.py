"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict


class StrictRequestModel(BaseModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)


class StandardizedModel(BaseModel):
    """Response DTO base; reads ORM objects directly."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True, from_attributes=True)
