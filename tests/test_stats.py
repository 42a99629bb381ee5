# tests/test_stats.py
"""Tests for moderation statistics aggregation."""

from datetime import UTC, datetime, timedelta

from whalebyte_moderation.models.report import Report, ReportStatus, ReportVote
from whalebyte_moderation.services.stats import ModerationStats, compute_stats

CREATED = datetime(2026, 3, 1, tzinfo=UTC)


def _report(status: ReportStatus, *, ai: float | None = None, votes: int = 0, minutes: int = 0) -> Report:
    return Report(
        id=f"r{status.value}{ai}{votes}{minutes}",
        content_id="post-1",
        content_type="post",
        reporter_id="reporter",
        reason="spam",
        description="",
        status=status.value,
        ai_confidence=ai,
        ai_flags=[],
        created_at=CREATED,
        updated_at=CREATED + timedelta(minutes=minutes),
        resolved_at=None if status is ReportStatus.PENDING else CREATED + timedelta(minutes=minutes),
        votes=[
            ReportVote(voter_id=f"v{i}", decision="remove", cast_at=CREATED) for i in range(votes)
        ],
    )


def test_empty_collection_yields_zeroes() -> None:
    assert compute_stats([], ai_confidence_threshold=0.8) == ModerationStats()


def test_counts_by_status() -> None:
    reports = [
        _report(ReportStatus.PENDING, votes=2),
        _report(ReportStatus.RESOLVED_REMOVED, votes=5, minutes=10),
        _report(ReportStatus.RESOLVED_KEPT, votes=5, minutes=20),
        _report(ReportStatus.AUTO_REMOVED, ai=0.95, minutes=0),
        _report(ReportStatus.REJECTED, votes=1, minutes=1440),
    ]

    stats = compute_stats(reports, ai_confidence_threshold=0.8)

    assert stats.total_reports == 5
    assert stats.pending_reports == 1
    assert stats.resolved_reports == 3
    assert stats.resolved_removed_reports == 1
    assert stats.resolved_kept_reports == 1
    assert stats.auto_removed_reports == 1
    assert stats.rejected_reports == 1
    assert stats.community_votes == 13


def test_ai_detections_use_threshold_inclusively() -> None:
    reports = [
        _report(ReportStatus.PENDING, ai=0.8),
        _report(ReportStatus.PENDING, ai=0.79),
        _report(ReportStatus.PENDING),
    ]
    assert compute_stats(reports, ai_confidence_threshold=0.8).ai_detections == 1


def test_average_response_time_covers_terminal_reports_only() -> None:
    reports = [
        _report(ReportStatus.PENDING, minutes=500),
        _report(ReportStatus.RESOLVED_REMOVED, minutes=10),
        _report(ReportStatus.REJECTED, minutes=30),
    ]
    stats = compute_stats(reports, ai_confidence_threshold=0.8)
    assert stats.average_response_time == 20 * 60


def test_average_response_time_ignores_later_annotation() -> None:
    report = _report(ReportStatus.RESOLVED_KEPT, minutes=15)
    report.updated_at = CREATED + timedelta(days=3)

    stats = compute_stats([report], ai_confidence_threshold=0.8)

    assert stats.average_response_time == 15 * 60
