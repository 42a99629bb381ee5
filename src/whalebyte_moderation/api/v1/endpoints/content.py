"""Content registration endpoints for the WhaleByte API."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from whalebyte_moderation.api.v1.dependencies import CurrentIdentityDep, ModerationServiceDep
from whalebyte_moderation.schemas.content import ContentCreate, ContentResponse
from whalebyte_moderation.services.content_store import ContentRecord, SqlContentStore

router = APIRouter(prefix="/content", tags=["content"])


def get_content_store_dep(service: ModerationServiceDep) -> SqlContentStore:
    """Return the writable content store behind the moderation service."""
    store = service.content_store
    if not isinstance(store, SqlContentStore):
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail="Content is managed by an external store",
        )
    return store


ContentStoreDep = Annotated[SqlContentStore, Depends(get_content_store_dep)]


@router.post("/", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    payload: ContentCreate,
    identity: CurrentIdentityDep,
    store: ContentStoreDep,
) -> ContentRecord:
    """Register a post, comment or sphere authored by the caller."""
    return store.create_content(
        content_id=uuid.uuid4().hex,
        content_type=payload.content_type,
        author_id=identity.user_id,
        body=payload.body,
        media_refs=payload.media_refs,
        sphere_id=payload.sphere_id,
    )


@router.get("/{content_id}", response_model=ContentResponse)
async def get_content(content_id: str, service: ModerationServiceDep) -> ContentRecord:
    """Return a content item together with its moderation status."""
    content = service.content_store.get_content(content_id)
    if content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Content not found",
        )
    return content
