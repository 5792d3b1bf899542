"""Pydantic base schema utilities for the agent core models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base Pydantic model for all domain schemas.

    - ``populate_by_name=True``: allow initialization by alias or field name.
    - ``extra="forbid"``: reject unknown fields so malformed payloads fail loudly.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )


class FrozenSchema(BaseSchema):
    """Immutable variant used for value objects produced by the command pipeline."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )
