# src/whalebyte_moderation/models/content.py
"""SQLAlchemy model backing the reference content store."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from whalebyte_moderation.db.session import Base
from whalebyte_moderation.db.time import UTCDateTime, utcnow


class ContentType(str, Enum):
    """Kinds of content a report can target."""

    POST = "post"
    COMMENT = "comment"
    SPHERE = "sphere"


class ContentStatus(str, Enum):
    """Moderation visibility of a content item."""

    ACTIVE = "active"
    UNDER_REVIEW = "under_review"
    REMOVED = "removed"


class ContentItem(Base):
    """A post, comment or sphere as seen by the moderation subsystem."""

    __tablename__ = "content_item"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    content_type: Mapped[str] = mapped_column(String(16), nullable=False)
    author_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    # Spheres are the community containers posts live in; a sphere has none.
    sphere_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    media_refs: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    moderation_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ContentStatus.ACTIVE.value,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
