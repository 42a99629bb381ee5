# src/whalebyte_moderation/services/__init__.py
"""Business logic services for the WhaleByte moderation engine."""

from .classifier import ContentCheckResult, HttpClassifier, KeywordClassifier, NullClassifier
from .content_store import ContentRecord, SqlContentStore
from .moderation import ModerationPolicy, ModerationService, ReportFilter, VotingStatus
from .resolution import ModerationThresholds, VoteTally, evaluate_resolution
from .stats import ModerationStats, compute_stats

__all__ = [
    "ContentCheckResult", "HttpClassifier", "KeywordClassifier", "NullClassifier",
    "ContentRecord", "SqlContentStore",
    "ModerationPolicy", "ModerationService", "ReportFilter", "VotingStatus",
    "ModerationThresholds", "VoteTally", "evaluate_resolution",
    "ModerationStats", "compute_stats",
]
