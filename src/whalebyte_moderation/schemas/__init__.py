# src/whalebyte_moderation/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .content import ContentCreate, ContentResponse
from .moderation import (
    ContentCheckRequest,
    ContentCheckResponse,
    ModerationStatsResponse,
    ModeratorNotesUpdate,
    ReportCreate,
    ReportResponse,
    ThresholdsResponse,
    VoteCreate,
    VoteResponse,
    VotingStatusResponse,
)

__all__ = [
    "ContentCreate", "ContentResponse",
    "ContentCheckRequest", "ContentCheckResponse",
    "ModerationStatsResponse", "ModeratorNotesUpdate",
    "ReportCreate", "ReportResponse",
    "ThresholdsResponse",
    "VoteCreate", "VoteResponse", "VotingStatusResponse",
]
