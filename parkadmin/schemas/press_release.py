"""
Pydantic schemas for Press Release endpoints.
"""

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parkadmin.schemas.common import parse_date_input, strip_required
from parkadmin.schemas.normalize import normalize_image


class PressReleaseCreate(BaseModel):
    """
    Request schema for creating a press release.

    ``image`` is either a data URI (uploaded to the CDN) or an existing URL.

    Example:
        {
            "title": "Park opens new incubator",
            "publisher": "Daily News",
            "date": "2024-03-14",
            "link": "https://news.example.com/article",
            "image": "data:image/jpeg;base64,..."
        }
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., max_length=255)
    publisher: str = Field(..., max_length=100)
    date: dt.date
    link: str = Field(..., max_length=2000)
    image: str

    @field_validator("title", "publisher", "link", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> str:
        return strip_required(v)

    @field_validator("date", mode="before")
    @classmethod
    def date_input(cls, v: Any) -> Any:
        return parse_date_input(v)

    @field_validator("image", mode="before")
    @classmethod
    def image_input(cls, v: Any) -> Any:
        image = normalize_image(v)
        if image is None:
            raise ValueError("Image is required")
        return image


class PressReleaseUpdate(BaseModel):
    """
    Request schema for updating a press release.

    Only fields present in the body are changed. ``"image": null`` (or "")
    removes the current image and deletes it from the CDN.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, max_length=255)
    publisher: Optional[str] = Field(None, max_length=100)
    date: Optional[dt.date] = None
    link: Optional[str] = Field(None, max_length=2000)
    image: Optional[str] = None

    @field_validator("title", "publisher", "link", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return strip_required(v)

    @field_validator("date", mode="before")
    @classmethod
    def date_input(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Date cannot be removed")
        return parse_date_input(v)

    @field_validator("image", mode="before")
    @classmethod
    def image_input(cls, v: Any) -> Any:
        return normalize_image(v)


class PressReleaseResponse(BaseModel):
    """A press release as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    seq: int
    title: str
    publisher: str
    date: dt.date
    link: str
    image: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class PressReleaseMutationResponse(BaseModel):
    message: str
    press_release: PressReleaseResponse
    warning: Optional[str] = None
