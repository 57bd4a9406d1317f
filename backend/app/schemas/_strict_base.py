"""Strict schema baselines with forbidden extras and camelCase aliases."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class StrictRequestModel(StrictModel):
    """Request DTO base that always forbids unexpected fields."""

    # Clients send camelCase; tests and services may use field names
    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
