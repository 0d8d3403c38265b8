"""
Database Base Classes and Common Utilities

This module provides the foundation for all database models in the application.

Key Concepts:
--------------
1. DeclarativeBase: SQLAlchemy's base class that enables ORM functionality
2. CommonTableAttributes: Shared columns/methods used across all models
3. orm_registry: Central registry that tracks all models and their metadata

Identifiers:
------------
Records are addressed by an opaque 32-character hex id generated when the
object is created. The human-facing number shown in the admin tables is the
separate ``seq`` column that content models add themselves.
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, registry


# ================================
# Naming Convention for Constraints
# ================================
# Consistent constraint names keep Alembic autogenerate diffs stable.
convention = {
    "ix": "ix_%(column_0_label)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_name)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

metadata = MetaData(naming_convention=convention)

orm_registry = registry(metadata=metadata)


# ================================
# Identifier helpers
# ================================

ID_LENGTH = 32
_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    """Generate a new opaque record id."""
    return uuid.uuid4().hex


def is_valid_id(value: str) -> bool:
    """Return True if ``value`` has the shape of an id produced by new_id()."""
    return bool(value) and bool(_ID_PATTERN.match(value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ================================
# Base DeclarativeBase Class
# ================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Usage:
        class Category(Base):
            __tablename__ = "categories"
            id: Mapped[str] = mapped_column(primary_key=True)
    """

    registry = orm_registry

    metadata = metadata

    __tablename__: str


# ================================
# Common Table Attributes Mixin
# ================================
class CommonTableAttributes:
    """
    Mixin that provides common fields and methods to all models.

    Common Fields Added:
    --------------------
    - id: Opaque primary key, assigned on creation, never changes
    - created_at: When the record was created (set once, never changes)
    - updated_at: When the record was last modified (updates automatically)

    Timestamps are timezone-aware UTC.
    """

    id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        primary_key=True,
        default=new_id,
        comment="Opaque record identifier"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Timestamp when record was created (UTC)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Timestamp when record was last updated (UTC)"
    )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"

    def dict(self) -> dict[str, Any]:
        """Convert model instance to a plain dictionary of column values."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }


# ================================
# Convenient Base Model
# ================================
class BaseModel(Base, CommonTableAttributes):
    """
    Ready-to-use base class for all application models.

    Every model automatically gets:
    - Primary key (id)
    - Creation timestamp (created_at)
    - Update timestamp (updated_at)
    - Useful methods (dict(), __repr__())
    """

    __abstract__ = True


# ================================
# String Length Constraints
# ================================
String50 = String(50)  # Example: status, short codes
String100 = String(100)  # Example: category names, publishers
String255 = String(255)  # Example: email, titles
String500 = String(500)  # Example: locations
String2000 = String(2000)  # Example: URLs (CDN links, press links)
