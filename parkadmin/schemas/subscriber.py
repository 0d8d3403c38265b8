"""
Pydantic schemas for Subscriber endpoints.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class SubscriberCreate(BaseModel):
    """
    Newsletter sign-up request.

    Example:
        {"email": "reader@example.com"}
    """

    model_config = ConfigDict(extra="ignore")

    email: str = Field(..., max_length=255)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Email is required")
        if not isinstance(v, str):
            raise ValueError("Email must be a string")
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v


class SubscriberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    seq: int
    email: str
    created_at: datetime


class SubscriberMutationResponse(BaseModel):
    message: str
    subscriber: SubscriberResponse
