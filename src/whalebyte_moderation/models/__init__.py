# src/whalebyte_moderation/models/__init__.py
"""SQLAlchemy models for the WhaleByte moderation service."""

from .content import ContentItem, ContentStatus, ContentType
from .report import (
    Report,
    ReportReason,
    ReportStatus,
    ReportVote,
    ResolutionCause,
    VoteDecision,
)

__all__ = [
    "ContentItem", "ContentStatus", "ContentType",
    "Report", "ReportReason", "ReportStatus", "ReportVote",
    "ResolutionCause", "VoteDecision",
]
