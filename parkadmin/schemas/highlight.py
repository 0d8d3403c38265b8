"""
Pydantic schemas for Highlight endpoints.

``sdg`` and ``images`` go through the boundary normalizers so that handlers
always receive ``list[str]``. Any ``seq`` a client sends is ignored: the
server allocates it on create and preserves it on edit.
"""

import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parkadmin.models.content import HighlightStatus
from parkadmin.schemas.common import parse_date_input, reference_id, strip_optional, strip_required
from parkadmin.schemas.normalize import normalize_images, normalize_sdg


# ========================================
# Request Schemas
# ========================================


class HighlightCreate(BaseModel):
    """
    Request schema for creating a highlight.

    Example:
        {
            "title": "Robotics demo day",
            "content": "<p>...</p>",
            "status": "draft",
            "date": "2024-05-02",
            "location": "Hall B",
            "sdg": ["Goal 9"],
            "category": "3f2c...",
            "images": ["data:image/png;base64,...", "https://res.cloudinary.com/..."]
        }
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., max_length=255)
    content: str
    status: HighlightStatus = HighlightStatus.DRAFT
    date: Optional[dt.date] = None
    location: Optional[str] = Field(None, max_length=500)
    sdg: List[str] = Field(default_factory=list)
    category: Optional[str] = Field(
        None,
        description="Category id; empty string means no category",
    )
    images: List[str] = Field(default_factory=list)

    @field_validator("title", "content", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> str:
        return strip_required(v)

    @field_validator("location", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        return strip_optional(v)

    @field_validator("category", mode="before")
    @classmethod
    def category_reference(cls, v: Any) -> Optional[str]:
        return reference_id(v)

    @field_validator("date", mode="before")
    @classmethod
    def date_input(cls, v: Any) -> Any:
        return parse_date_input(v)

    @field_validator("sdg", mode="before")
    @classmethod
    def normalize_sdg_field(cls, v: Any) -> List[str]:
        return normalize_sdg(v)

    @field_validator("images", mode="before")
    @classmethod
    def normalize_images_field(cls, v: Any) -> List[str]:
        return normalize_images(v)


class HighlightUpdate(BaseModel):
    """
    Request schema for updating a highlight.

    Only fields present in the request body are changed. Send
    ``"category": null`` (or "") to remove the category.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    status: Optional[HighlightStatus] = None
    date: Optional[dt.date] = None
    location: Optional[str] = Field(None, max_length=500)
    sdg: Optional[List[str]] = None
    category: Optional[str] = None
    images: Optional[List[str]] = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return strip_required(v)

    @field_validator("location", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        return strip_optional(v)

    @field_validator("category", mode="before")
    @classmethod
    def category_reference(cls, v: Any) -> Optional[str]:
        return reference_id(v)

    @field_validator("date", mode="before")
    @classmethod
    def date_input(cls, v: Any) -> Any:
        return parse_date_input(v)

    @field_validator("sdg", mode="before")
    @classmethod
    def normalize_sdg_field(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        return normalize_sdg(v)

    @field_validator("images", mode="before")
    @classmethod
    def normalize_images_field(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        return normalize_images(v)


class HighlightStatusUpdate(BaseModel):
    """Request schema for ``PATCH /highlights/{id}/status``."""

    status: HighlightStatus


# ========================================
# Response Schemas
# ========================================


class CategoryRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class HighlightResponse(BaseModel):
    """A highlight as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    seq: int
    title: str
    content: str
    status: HighlightStatus
    date: Optional[dt.date] = None
    location: Optional[str] = None
    sdg: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    category: Optional[CategoryRef] = None
    author_email: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class HighlightMutationResponse(BaseModel):
    """Envelope returned by create/update."""

    message: str
    highlight: HighlightResponse
    warning: Optional[str] = None
