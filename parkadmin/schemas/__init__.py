"""
Pydantic schemas for request/response validation.

Import all schemas here for easy access.
"""

from parkadmin.schemas.auth import (
    GoogleAuthRequest,
    Token,
    UserResponse,
    UserUpdate,
    UserWithToken,
)
from parkadmin.schemas.category import (
    CategoryMutationResponse,
    CategoryResponse,
    CategoryWrite,
)
from parkadmin.schemas.common import (
    DeleteResponse,
    ErrorResponse,
    MessageResponse,
    NextSequenceResponse,
)
from parkadmin.schemas.highlight import (
    HighlightCreate,
    HighlightMutationResponse,
    HighlightResponse,
    HighlightStatusUpdate,
    HighlightUpdate,
)
from parkadmin.schemas.press_release import (
    PressReleaseCreate,
    PressReleaseMutationResponse,
    PressReleaseResponse,
    PressReleaseUpdate,
)
from parkadmin.schemas.subscriber import (
    SubscriberCreate,
    SubscriberMutationResponse,
    SubscriberResponse,
)

__all__ = [
    # Authentication
    "GoogleAuthRequest",
    "Token",
    "UserResponse",
    "UserUpdate",
    "UserWithToken",
    # Common
    "DeleteResponse",
    "ErrorResponse",
    "MessageResponse",
    "NextSequenceResponse",
    # Content
    "CategoryMutationResponse",
    "CategoryResponse",
    "CategoryWrite",
    "HighlightCreate",
    "HighlightMutationResponse",
    "HighlightResponse",
    "HighlightStatusUpdate",
    "HighlightUpdate",
    "PressReleaseCreate",
    "PressReleaseMutationResponse",
    "PressReleaseResponse",
    "PressReleaseUpdate",
    "SubscriberCreate",
    "SubscriberMutationResponse",
    "SubscriberResponse",
]
