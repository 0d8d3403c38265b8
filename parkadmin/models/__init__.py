"""
Database Models

Import models from this module to ensure they're registered with SQLAlchemy:

    from parkadmin.models import Highlight, PressRelease, User

This ensures that:
1. Alembic can detect all models for migrations
2. Relationships resolve correctly
"""

from parkadmin.models.content import (
    Category,
    Highlight,
    HighlightStatus,
    PressRelease,
    SequenceCounter,
    Subscriber,
)
from parkadmin.models.user import User

__all__ = [
    # Content models
    "Category",
    "Highlight",
    "PressRelease",
    "Subscriber",
    "SequenceCounter",
    # User models
    "User",
    # Enums
    "HighlightStatus",
]
