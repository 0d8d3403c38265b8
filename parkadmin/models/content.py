"""
Content Models

This module contains the records managed from the admin panel.

Models Included:
----------------
1. Category - Taxonomy used to group highlights
2. Highlight - News/event item with images, SDG tags, category and workflow status
3. PressRelease - Press coverage entry with a single image and external link
4. Subscriber - Newsletter subscriber
5. SequenceCounter - Per-resource counter backing the human-facing ``seq``
6. HighlightStatus (Enum) - draft | published | rejected

Database Tables:
----------------
- categories
- highlights
- press_releases
- subscribers
- sequence_counters

Relationships:
--------------
- Category (1) ←→ (Many) Highlight, optional on the highlight side.
  Deleting a category leaves its highlights uncategorized.

The ``seq`` Column:
-------------------
Highlights, press releases and subscribers carry a ``seq`` integer that the
admin tables display and sort by. It is unique per resource type and is
handed out by ``parkadmin.services.sequence.SequenceAllocator`` through an
atomic increment on ``sequence_counters``.
"""

import datetime as dt
import enum
from typing import Optional

from sqlalchemy import JSON, Date, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkadmin.db.base import Base, BaseModel, String50, String100, String255, String500, String2000

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONList = JSON().with_variant(JSONB(), "postgresql")


# ================================
# Enums for Choice Fields
# ================================

class HighlightStatus(str, enum.Enum):
    """
    Editorial workflow status of a highlight.

    New highlights start as DRAFT. Editors publish or reject them from the
    admin table.
    """

    DRAFT = "draft"
    PUBLISHED = "published"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


# ================================
# Category Model
# ================================

class Category(BaseModel):
    """Highlight category (e.g. "Events", "Research", "Startups")."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(
        String100,
        nullable=False,
        unique=True,
        comment="Display name, unique"
    )

    highlights: Mapped[list["Highlight"]] = relationship(
        "Highlight",
        back_populates="category",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"Category(id={self.id}, name='{self.name}')"


# ================================
# Highlight Model
# ================================

class Highlight(BaseModel):
    """
    Published news/event content record.

    Fields:
    -------
    - seq: human-facing sequence number, unique among highlights
    - title, content: required; content is rich text (HTML)
    - status: workflow status, defaults to draft
    - date, location: optional event details
    - sdg: list of Sustainable Development Goal tags (strings)
    - images: list of CDN URLs; the binaries live in the CDN
    - category: optional Category
    - author_email: who created the record
    """

    __tablename__ = "highlights"

    seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        unique=True,
        comment="Sequence number shown in the admin table"
    )

    title: Mapped[str] = mapped_column(
        String255,
        nullable=False,
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Rich text body (HTML)"
    )

    status: Mapped[HighlightStatus] = mapped_column(
        Enum(
            HighlightStatus,
            name="highlight_status",
            native_enum=False,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=HighlightStatus.DRAFT,
        index=True,
    )

    date: Mapped[Optional[dt.date]] = mapped_column(
        Date,
        nullable=True,
        comment="Date of the event the highlight covers"
    )

    location: Mapped[Optional[str]] = mapped_column(
        String500,
        nullable=True,
    )

    sdg: Mapped[list] = mapped_column(
        JSONList,
        nullable=False,
        default=list,
        comment="SDG tags"
    )

    images: Mapped[list] = mapped_column(
        JSONList,
        nullable=False,
        default=list,
        comment="CDN image URLs"
    )

    category_id: Mapped[Optional[str]] = mapped_column(
        String(32),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    author_email: Mapped[Optional[str]] = mapped_column(
        String255,
        nullable=True,
        comment="Email of the admin user who created the record"
    )

    category: Mapped[Optional["Category"]] = relationship(
        "Category",
        back_populates="highlights",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"Highlight(id={self.id}, seq={self.seq}, status={self.status})"


# ================================
# PressRelease Model
# ================================

class PressRelease(BaseModel):
    """
    Press coverage entry.

    ``image`` holds a single CDN URL. It is nullable because the record is
    written before its image is uploaded; a failed upload leaves it empty.
    """

    __tablename__ = "press_releases"

    seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        unique=True,
    )

    title: Mapped[str] = mapped_column(String255, nullable=False)

    publisher: Mapped[str] = mapped_column(String100, nullable=False)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    link: Mapped[str] = mapped_column(String2000, nullable=False)

    image: Mapped[Optional[str]] = mapped_column(String2000, nullable=True)

    def __repr__(self) -> str:
        return f"PressRelease(id={self.id}, seq={self.seq})"


# ================================
# Subscriber Model
# ================================

class Subscriber(BaseModel):
    """Newsletter subscriber. ``created_at`` doubles as the subscription date."""

    __tablename__ = "subscribers"

    seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        unique=True,
    )

    email: Mapped[str] = mapped_column(
        String255,
        nullable=False,
        unique=True,
    )

    def __repr__(self) -> str:
        return f"Subscriber(id={self.id}, seq={self.seq})"


# ================================
# SequenceCounter Model
# ================================

class SequenceCounter(Base):
    """
    One row per resource type holding the last ``seq`` handed out.

    Allocation is ``UPDATE sequence_counters SET value = value + 1
    WHERE resource = :r RETURNING value`` so two concurrent creations can
    never receive the same number.
    """

    __tablename__ = "sequence_counters"

    resource: Mapped[str] = mapped_column(String50, primary_key=True)

    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"SequenceCounter(resource={self.resource}, value={self.value})"
