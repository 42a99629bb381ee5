"""Deterministic resolution rules for pending reports.

Evaluation order is fixed:

1. An AI confidence at or above the AI threshold auto-removes the content.
2. Once enough votes are cast, a remove share at or above the removal
   threshold removes the content, and a keep share at or above the same
   threshold keeps it.
3. A report whose voting period has elapsed without reaching either
   threshold is rejected.

All comparisons are inclusive, so exactly 60% satisfies a 0.6 threshold.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from whalebyte_moderation.models.report import ReportStatus, ResolutionCause, VoteDecision


@dataclass(frozen=True)
class ModerationThresholds:
    """Configured gates for resolving a report."""

    min_votes_required: int = 5
    removal_threshold: float = 0.6
    ai_confidence_threshold: float = 0.8
    voting_period: timedelta = timedelta(hours=24)

    def __post_init__(self) -> None:
        if self.min_votes_required < 1:
            raise ValueError("min_votes_required must be a positive integer")
        if not 0.0 < self.removal_threshold <= 1.0:
            raise ValueError("removal_threshold must be in (0, 1]")
        if not 0.0 < self.ai_confidence_threshold <= 1.0:
            raise ValueError("ai_confidence_threshold must be in (0, 1]")
        if self.voting_period <= timedelta(0):
            raise ValueError("voting_period must be positive")


@dataclass(frozen=True)
class VoteTally:
    """Remove/keep counts over a report's live votes."""

    remove_count: int = 0
    keep_count: int = 0

    @classmethod
    def from_decisions(cls, decisions: Iterable[str]) -> VoteTally:
        remove_count = 0
        keep_count = 0
        for decision in decisions:
            if decision == VoteDecision.REMOVE.value:
                remove_count += 1
            elif decision == VoteDecision.KEEP.value:
                keep_count += 1
        return cls(remove_count=remove_count, keep_count=keep_count)

    @property
    def total(self) -> int:
        return self.remove_count + self.keep_count

    @property
    def remove_fraction(self) -> float:
        return self.remove_count / self.total if self.total else 0.0

    @property
    def keep_fraction(self) -> float:
        return self.keep_count / self.total if self.total else 0.0


@dataclass(frozen=True)
class Resolution:
    """Terminal outcome together with the single cause that produced it."""

    status: ReportStatus
    cause: ResolutionCause


def voting_deadline(created_at: datetime, thresholds: ModerationThresholds) -> datetime:
    """Return the instant after which an undecided report is rejected."""
    return created_at + thresholds.voting_period


def evaluate_resolution(
    tally: VoteTally,
    ai_confidence: float | None,
    created_at: datetime,
    now: datetime,
    thresholds: ModerationThresholds,
) -> Resolution | None:
    """Return the resolution a pending report has reached, or None.

    Args:
        tally: Live vote counts for the report.
        ai_confidence: Score from the automated content check, if any.
        created_at: When the report was filed.
        now: Evaluation instant.
        thresholds: Configured resolution gates.

    Returns:
        The terminal ``Resolution`` or None when the report stays pending.
    """
    if ai_confidence is not None and ai_confidence >= thresholds.ai_confidence_threshold:
        return Resolution(ReportStatus.AUTO_REMOVED, ResolutionCause.AI_THRESHOLD)

    if tally.total >= thresholds.min_votes_required:
        if tally.remove_fraction >= thresholds.removal_threshold:
            return Resolution(ReportStatus.RESOLVED_REMOVED, ResolutionCause.VOTE_THRESHOLD)
        if tally.keep_fraction >= thresholds.removal_threshold:
            return Resolution(ReportStatus.RESOLVED_KEPT, ResolutionCause.VOTE_THRESHOLD)

    if now >= voting_deadline(created_at, thresholds):
        return Resolution(ReportStatus.REJECTED, ResolutionCause.VOTING_EXPIRED)

    return None
