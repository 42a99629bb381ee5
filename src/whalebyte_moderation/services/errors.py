"""Exceptions raised by the moderation services."""

from __future__ import annotations


class ModerationError(RuntimeError):
    """Base exception for moderation failures surfaced to callers."""


class NotFoundError(ModerationError):
    """Raised when a referenced report or content item does not exist."""


class ReportNotFoundError(NotFoundError):
    """Raised when no report exists for the given identifier."""

    def __init__(self, report_id: str) -> None:
        super().__init__(f"Report {report_id} not found")
        self.report_id = report_id


class ContentNotFoundError(NotFoundError):
    """Raised when the content store cannot resolve a content identifier."""

    def __init__(self, content_id: str) -> None:
        super().__init__(f"Content {content_id} not found")
        self.content_id = content_id


class AlreadyResolvedError(ModerationError):
    """Raised when a mutation targets a report in a terminal status."""


class ReportAlreadyResolvedError(AlreadyResolvedError):
    """Raised when a vote or AI result arrives for a resolved report."""

    def __init__(self, report_id: str, status: str) -> None:
        super().__init__(f"Report {report_id} is already {status}")
        self.report_id = report_id
        self.status = status


class ValidationError(ModerationError):
    """Raised for malformed input before any state is mutated."""


class SelfReportError(ModerationError):
    """Raised when a user reports content they authored."""


class SelfVoteError(ModerationError):
    """Raised when voting policy bars the author or reporter from voting."""


class ClassifierUnavailableError(ModerationError):
    """Raised by classifiers that fail or time out.

    Never surfaced to end users; the engine logs it and falls back to
    vote-only resolution.
    """
