# app/schemas/preferences.py
"""
Schemas for preference endpoints.

PUT /api/preferences         - Replace the caller's preferences
GET /api/preferences         - Read the caller's preferences
GET /api/personalized-feed   - Articles matching the caller's preferences
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models import MAX_INT

EntityId = Annotated[int, Field(ge=1, le=MAX_INT)]


class PreferenceUpdate(BaseModel):
    """
    New preferences. Omitted or null lists are stored as empty (no filter).
    Every ID must reference an existing entity.
    """

    preferred_categories: list[EntityId] | None = Field(None, description="Category IDs")
    preferred_sources: list[EntityId] | None = Field(None, description="Source IDs")
    preferred_authors: list[EntityId] | None = Field(None, description="Author IDs")

    @field_validator("preferred_categories", "preferred_sources", "preferred_authors")
    @classmethod
    def dedupe(cls, v: list[int] | None) -> list[int]:
        return list(dict.fromkeys(v)) if v else []


class PreferenceResponse(BaseModel):
    """Saved preferences."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    preferred_categories: list[int] = Field(default_factory=list)
    preferred_sources: list[int] = Field(default_factory=list)
    preferred_authors: list[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
