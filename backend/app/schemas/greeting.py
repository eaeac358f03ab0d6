"""Greeting Schemas — Pydantic models for the greeting create/read contract.

Invariants:
    - Wire format is camelCase: {id, recipientName, recipientAge, photos}
    - GreetingCreate.recipient_name: stripped, 1-200 chars
    - GreetingCreate.recipient_age: 1-150
    - GreetingCreate.photos: 2-12 references, order preserved
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.core.domain_types import (
    MAX_AGE, MAX_NAME_LENGTH, MAX_PHOTOS, MIN_AGE, MIN_PHOTOS,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )


class GreetingCreate(_CamelModel):
    """Validated input handed to the greeting store."""
    recipient_name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    recipient_age: int = Field(ge=MIN_AGE, le=MAX_AGE)
    photos: list[str] = Field(min_length=MIN_PHOTOS, max_length=MAX_PHOTOS)

    @field_validator("recipient_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class GreetingResponse(_CamelModel):
    """Greeting as returned by the API."""
    id: UUID
    recipient_name: str
    recipient_age: int
    photos: list[str]
