# src/whalebyte_moderation/schemas/content.py
"""Content-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from whalebyte_moderation.models.content import ContentStatus, ContentType


class ContentCreate(BaseModel):
    """Schema for registering a content item with the moderation service."""

    content_type: ContentType
    body: str = Field("", max_length=5000, description="Text content")
    media_refs: list[str] = Field(default_factory=list, description="Media URLs or IPFS hashes")
    sphere_id: str | None = Field(None, max_length=64)


class ContentResponse(BaseModel):
    """Schema for content information returned by the API."""

    id: str
    content_type: ContentType
    author_id: str
    body: str
    media_refs: list[str]
    sphere_id: str | None
    status: ContentStatus

    model_config = ConfigDict(from_attributes=True)
