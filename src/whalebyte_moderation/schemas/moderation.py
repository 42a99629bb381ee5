# src/whalebyte_moderation/schemas/moderation.py
"""Moderation-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from whalebyte_moderation.models.content import ContentType
from whalebyte_moderation.models.report import (
    ReportReason,
    ReportStatus,
    ResolutionCause,
    VoteDecision,
)
from whalebyte_moderation.services.classifier import AIReportReason
from whalebyte_moderation.services.moderation import VotingStatus


class ReportCreate(BaseModel):
    """Schema for filing a report against a content item."""

    content_id: str = Field(..., min_length=1, max_length=64)
    content_type: ContentType
    reason: ReportReason
    description: str = Field("", description="Optional detail; required when reason is 'other'")


class VoteCreate(BaseModel):
    """Schema for casting or replacing a vote on a report."""

    decision: VoteDecision = Field(..., description="'remove' or 'keep'")


class ModeratorNotesUpdate(BaseModel):
    """Schema for annotating a report."""

    notes: str | None = None


class VoteResponse(BaseModel):
    """A single live vote on a report."""

    voter_id: str
    decision: VoteDecision
    cast_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportResponse(BaseModel):
    """Schema for report information returned by the API."""

    id: str
    content_id: str
    content_type: ContentType
    sphere_id: str | None
    reporter_id: str
    reason: ReportReason
    description: str
    status: ReportStatus
    resolution_cause: ResolutionCause | None
    ai_confidence: float | None
    ai_flags: list[AIReportReason]
    moderator_notes: str | None
    remove_count: int
    keep_count: int
    votes: list[VoteResponse]
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class VotingStatusResponse(BaseModel):
    """Tally and deadline for a report as seen by the caller."""

    report_id: str
    status: ReportStatus
    total: int
    remove_count: int
    keep_count: int
    user_vote: VoteDecision | None
    time_remaining_seconds: float

    @classmethod
    def from_status(cls, voting_status: VotingStatus) -> VotingStatusResponse:
        return cls(
            report_id=voting_status.report_id,
            status=voting_status.status,
            total=voting_status.total,
            remove_count=voting_status.remove_count,
            keep_count=voting_status.keep_count,
            user_vote=voting_status.user_vote,
            time_remaining_seconds=voting_status.time_remaining.total_seconds(),
        )


class ModerationStatsResponse(BaseModel):
    """Aggregate counts over all reports."""

    total_reports: int
    pending_reports: int
    resolved_reports: int
    resolved_removed_reports: int
    resolved_kept_reports: int
    rejected_reports: int
    auto_removed_reports: int
    ai_detections: int
    community_votes: int
    average_response_time: float = Field(..., description="Seconds from filing to resolution")

    model_config = ConfigDict(from_attributes=True)


class ThresholdsResponse(BaseModel):
    """Resolution thresholds currently in force."""

    min_votes_required: int
    removal_threshold: float
    ai_confidence_threshold: float
    voting_period_seconds: float


class ContentCheckRequest(BaseModel):
    """Schema for an ad-hoc automated content check."""

    text: str = Field("", max_length=10000)
    media_refs: list[str] = Field(default_factory=list)


class ContentCheckResponse(BaseModel):
    """Outcome of an automated content check."""

    is_allowed: bool
    confidence: float
    flags: list[AIReportReason]
