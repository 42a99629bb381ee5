"""Aggregate moderation statistics derived from the report collection."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from whalebyte_moderation.models.report import Report, ReportStatus

_RESOLVED_STATUSES = {
    ReportStatus.RESOLVED_REMOVED.value,
    ReportStatus.RESOLVED_KEPT.value,
    ReportStatus.AUTO_REMOVED.value,
}


@dataclass(frozen=True)
class ModerationStats:
    """Counts over the current report set; never mutated incrementally."""

    total_reports: int = 0
    pending_reports: int = 0
    resolved_reports: int = 0
    resolved_removed_reports: int = 0
    resolved_kept_reports: int = 0
    rejected_reports: int = 0
    auto_removed_reports: int = 0
    ai_detections: int = 0
    community_votes: int = 0
    average_response_time: float = 0.0


def compute_stats(reports: Iterable[Report], *, ai_confidence_threshold: float) -> ModerationStats:
    """Recompute moderation statistics from scratch.

    ``average_response_time`` is the mean of ``resolved_at - created_at`` in
    seconds over terminal reports, or 0 when none are terminal. Reports
    without a resolution instant fall back to ``updated_at``.
    """
    counts: dict[str, int] = {}
    total = 0
    ai_detections = 0
    community_votes = 0
    response_seconds: list[float] = []

    for report in reports:
        total += 1
        counts[report.status] = counts.get(report.status, 0) + 1
        community_votes += len(report.votes)
        if report.ai_confidence is not None and report.ai_confidence >= ai_confidence_threshold:
            ai_detections += 1
        if report.is_terminal:
            finished_at = report.resolved_at or report.updated_at
            response_seconds.append((finished_at - report.created_at).total_seconds())

    average = sum(response_seconds) / len(response_seconds) if response_seconds else 0.0

    return ModerationStats(
        total_reports=total,
        pending_reports=counts.get(ReportStatus.PENDING.value, 0),
        resolved_reports=sum(counts.get(status, 0) for status in _RESOLVED_STATUSES),
        resolved_removed_reports=counts.get(ReportStatus.RESOLVED_REMOVED.value, 0),
        resolved_kept_reports=counts.get(ReportStatus.RESOLVED_KEPT.value, 0),
        rejected_reports=counts.get(ReportStatus.REJECTED.value, 0),
        auto_removed_reports=counts.get(ReportStatus.AUTO_REMOVED.value, 0),
        ai_detections=ai_detections,
        community_votes=community_votes,
        average_response_time=average,
    )
