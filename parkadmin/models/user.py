"""
User Models

Admin panel accounts. Users sign in with Google; the first sign-in creates
the account with ``is_allowed=False`` so an administrator has to let them in.

Access levels:
--------------
- is_allowed=False: may sign in, but every protected route answers 403
- is_allowed=True: may manage highlights, press releases, categories, subscribers
- is_admin=True: may additionally manage users
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from parkadmin.db.base import BaseModel, String100, String255, String2000


class User(BaseModel):
    """Admin panel user account."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String255,
        unique=True,
        nullable=False,
        index=True,
        comment="User's email address (from Google)"
    )

    name: Mapped[str] = mapped_column(
        String100,
        nullable=False,
    )

    avatar: Mapped[Optional[str]] = mapped_column(
        String2000,
        nullable=True,
        comment="Profile picture URL"
    )

    google_sub: Mapped[Optional[str]] = mapped_column(
        String255,
        unique=True,
        nullable=True,
        comment="Google account id (the token's sub claim)"
    )

    is_allowed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the user may use the admin panel"
    )

    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the user may manage other users"
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"User(id={self.id}, email='{self.email}', admin={self.is_admin})"
