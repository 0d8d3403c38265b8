"""
Shared response schemas and field helpers.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class ErrorResponse(BaseModel):
    """
    Error body produced by the exception handlers in ``parkadmin.main``.

    Example:
        {"detail": "Highlight not found", "code": "not_found"}
    """

    detail: str = Field(..., description="Human readable error message")
    code: Optional[str] = Field(None, description="Machine readable error code")


class DeleteResponse(BaseModel):
    """
    Result of a (batch) delete.

    ``missing`` lists requested ids that did not exist. ``warning`` is set
    when the records were deleted but some image clean-up failed.
    """

    message: str
    deleted: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    warning: Optional[str] = None


class NextSequenceResponse(BaseModel):
    """Preview of the ``seq`` the next created record will most likely get."""

    resource: str
    seq: int = Field(..., ge=1)


def strip_required(value: str) -> str:
    """Strip a required string field, rejecting blank values."""
    if value is None:
        raise ValueError("Field is required")
    if not isinstance(value, str):
        raise ValueError("Field must be a string")
    value = value.strip()
    if not value:
        raise ValueError("Field cannot be empty")
    return value


def strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("Field must be a string")
    value = value.strip()
    return value or None


def reference_id(value: Any) -> Optional[str]:
    """
    Accept a reference either as a bare id or as an embedded object
    (``{"id": ...}`` / ``{"_id": ...}``), as older forms sent it.
    """
    if isinstance(value, dict):
        value = value.get("id") or value.get("_id")
    if value is None:
        return None
    return strip_optional(str(value))


def parse_date_input(value: Any) -> Any:
    """
    Pre-process a date field: blank strings become None and ISO datetimes
    ("2024-05-02T00:00:00.000Z") are cut down to their date part.
    """
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        return value[:10]
    return value
