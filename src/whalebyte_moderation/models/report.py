# src/whalebyte_moderation/models/report.py
"""Models tracking user reports and the community votes cast on them."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from whalebyte_moderation.db.session import Base
from whalebyte_moderation.db.time import UTCDateTime


class ReportReason(str, Enum):
    """Reasons a user can pick when filing a report."""

    SPAM = "spam"
    HARASSMENT = "harassment"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    HATE_SPEECH = "hate_speech"
    MISINFORMATION = "misinformation"
    COPYRIGHT = "copyright"
    OTHER = "other"


class ReportStatus(str, Enum):
    """Lifecycle states of a report. Only PENDING accepts mutations."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED_REMOVED = "resolved_removed"
    RESOLVED_KEPT = "resolved_kept"
    REJECTED = "rejected"
    AUTO_REMOVED = "auto_removed"


class ResolutionCause(str, Enum):
    """What drove a report to its terminal status."""

    AI_THRESHOLD = "ai_threshold"
    VOTE_THRESHOLD = "vote_threshold"
    VOTING_EXPIRED = "voting_expired"


class VoteDecision(str, Enum):
    """A voter's verdict on the reported content."""

    REMOVE = "remove"
    KEEP = "keep"


class Report(Base):
    """A user-filed complaint against a content item."""

    __tablename__ = "report"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    # Reference only; the content itself lives in the content store.
    content_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content_type: Mapped[str] = mapped_column(String(16), nullable=False)
    sphere_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    reporter_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ReportStatus.PENDING.value,
        index=True,
    )
    resolution_cause: Mapped[str | None] = mapped_column(String(32), nullable=True)

    ai_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    ai_flags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    moderator_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    votes: Mapped[list[ReportVote]] = relationship(
        "ReportVote",
        back_populates="report",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ReportVote.cast_at",
    )

    @property
    def is_terminal(self) -> bool:
        """Return True once the report can no longer change outcome."""
        return self.status != ReportStatus.PENDING.value

    @property
    def remove_count(self) -> int:
        """Return the number of live remove votes."""
        return sum(1 for vote in self.votes if vote.decision == VoteDecision.REMOVE.value)

    @property
    def keep_count(self) -> int:
        """Return the number of live keep votes."""
        return sum(1 for vote in self.votes if vote.decision == VoteDecision.KEEP.value)

    def vote_of(self, voter_id: str) -> ReportVote | None:
        """Return the live vote cast by ``voter_id``, if any."""
        for vote in self.votes:
            if vote.voter_id == voter_id:
                return vote
        return None


class ReportVote(Base):
    """A single voter's live decision on a pending report."""

    __tablename__ = "report_vote"

    report_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("report.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    decision: Mapped[str] = mapped_column(String(8), nullable=False)
    cast_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    report: Mapped[Report] = relationship("Report", back_populates="votes")
