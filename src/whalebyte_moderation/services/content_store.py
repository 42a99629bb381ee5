"""Content store contract and its SQLAlchemy-backed implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy.orm import Session, sessionmaker

from whalebyte_moderation.models.content import ContentItem, ContentStatus, ContentType
from whalebyte_moderation.services.errors import ContentNotFoundError

__all__ = ["ContentRecord", "ContentStore", "SqlContentStore"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentRecord:
    """Read-only snapshot of a content item handed to the moderation engine."""

    id: str
    content_type: ContentType
    author_id: str
    body: str = ""
    media_refs: tuple[str, ...] = field(default_factory=tuple)
    sphere_id: str | None = None
    status: ContentStatus = ContentStatus.ACTIVE


class ContentStore(Protocol):
    def get_content(self, content_id: str) -> ContentRecord | None:
        ...

    def set_content_status(self, content_id: str, status: ContentStatus) -> None:
        ...


def _to_record(item: ContentItem) -> ContentRecord:
    return ContentRecord(
        id=item.id,
        content_type=ContentType(item.content_type),
        author_id=item.author_id,
        body=item.body,
        media_refs=tuple(item.media_refs or ()),
        sphere_id=item.sphere_id,
        status=ContentStatus(item.moderation_status),
    )


class SqlContentStore:
    """Thin wrapper around database access for content items."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize the store with a SQLAlchemy session factory."""
        self._session_factory = session_factory

    def get_content(self, content_id: str) -> ContentRecord | None:
        """Return a snapshot of the content item, or None if unknown."""
        with self._session_factory() as db:
            item = db.get(ContentItem, content_id)
            return _to_record(item) if item is not None else None

    def set_content_status(self, content_id: str, status: ContentStatus) -> None:
        """Persist a new moderation status for a content item.

        Raises:
            ContentNotFoundError: If the item does not exist.
        """
        with self._session_factory() as db:
            item = db.get(ContentItem, content_id)
            if item is None:
                raise ContentNotFoundError(content_id)
            if item.moderation_status != status.value:
                logger.info(
                    "Content %s moderation status %s -> %s",
                    content_id,
                    item.moderation_status,
                    status.value,
                )
                item.moderation_status = status.value
                db.commit()

    def create_content(
        self,
        *,
        content_id: str,
        content_type: ContentType,
        author_id: str,
        body: str = "",
        media_refs: Sequence[str] = (),
        sphere_id: str | None = None,
    ) -> ContentRecord:
        """Insert a new active content item and return its snapshot."""
        item = ContentItem(
            id=content_id,
            content_type=content_type.value,
            author_id=author_id,
            body=body,
            media_refs=list(media_refs),
            sphere_id=sphere_id,
            moderation_status=ContentStatus.ACTIVE.value,
        )
        with self._session_factory() as db:
            db.add(item)
            db.commit()
            return _to_record(item)
