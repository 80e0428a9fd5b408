# app/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for request/response schemas.

    The mobile client speaks camelCase (farmName, rfidTag, forSale),
    so fields are aliased to camelCase on the wire. Snake_case names
    are still accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiInput(ApiModel):
    """Base for request payloads: unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


def strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


def strip_optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None
