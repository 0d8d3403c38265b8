"""
Pydantic schemas for Category endpoints.

Older clients posted the name under the key ``category``; both spellings
are accepted.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from parkadmin.schemas.common import strip_required


class CategoryWrite(BaseModel):
    """Request schema for creating or renaming a category."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(
        ...,
        max_length=100,
        validation_alias=AliasChoices("name", "category"),
    )

    @field_validator("name", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> str:
        return strip_required(v)


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: datetime
    updated_at: datetime


class CategoryMutationResponse(BaseModel):
    message: str
    category: CategoryResponse
