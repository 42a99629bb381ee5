# src/whalebyte_moderation/services/moderation.py
"""Moderation services for WhaleByte.

``ModerationService`` owns the report lifecycle: filing reports, tallying
community votes, ingesting automated content checks, resolving reports and
pushing the resulting status onto the reported content.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Callable, Iterator, Sequence
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from whalebyte_moderation.core.settings import settings
from whalebyte_moderation.db.time import utcnow
from whalebyte_moderation.models.content import ContentStatus, ContentType
from whalebyte_moderation.models.report import (
    Report,
    ReportReason,
    ReportStatus,
    ReportVote,
    VoteDecision,
)
from whalebyte_moderation.services.classifier import (
    ContentCheckResult,
    ContentClassifier,
    build_classifier,
)
from whalebyte_moderation.services.content_store import (
    ContentRecord,
    ContentStore,
    SqlContentStore,
)
from whalebyte_moderation.services.errors import (
    ClassifierUnavailableError,
    ContentNotFoundError,
    ModerationError,
    ReportAlreadyResolvedError,
    ReportNotFoundError,
    SelfReportError,
    SelfVoteError,
    ValidationError,
)
from whalebyte_moderation.services.identity import IdentityProvider
from whalebyte_moderation.services.resolution import (
    ModerationThresholds,
    Resolution,
    VoteTally,
    evaluate_resolution,
    voting_deadline,
)
from whalebyte_moderation.services.stats import ModerationStats, compute_stats

logger = logging.getLogger(__name__)

_EnumT = TypeVar("_EnumT", bound=Enum)

_REMOVED_STATUSES = {ReportStatus.RESOLVED_REMOVED.value, ReportStatus.AUTO_REMOVED.value}


@dataclass(frozen=True)
class ModerationPolicy:
    """Who may report and vote, plus input bounds."""

    block_self_reports: bool = True
    block_author_votes: bool = False
    block_reporter_votes: bool = False
    description_max_length: int = 500
    notes_max_length: int = 1000


@dataclass(frozen=True)
class ReportFilter:
    """Optional criteria for listing reports; unset fields match everything."""

    status: ReportStatus | None = None
    content_id: str | None = None
    content_type: ContentType | None = None
    reporter_id: str | None = None
    sphere_id: str | None = None


@dataclass(frozen=True)
class VotingStatus:
    """Read model describing the vote on a single report."""

    report_id: str
    status: ReportStatus
    total: int
    remove_count: int
    keep_count: int
    user_vote: VoteDecision | None
    time_remaining: timedelta


class _ReportLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


def _coerce(enum_cls: type[_EnumT], value: object, field_name: str) -> _EnumT:
    try:
        return enum_cls(value)
    except ValueError as err:
        allowed = ", ".join(str(member.value) for member in enum_cls)
        raise ValidationError(f"Invalid {field_name} {value!r}; expected one of: {allowed}") from err


def _new_report_id() -> str:
    return uuid.uuid4().hex


class ModerationService:
    """Service handling report submission, voting and resolution.

    Mutations of a single report are serialized by a per-report lock and
    committed in one transaction; mutations of different reports run
    independently. The automated content check runs as a background task and
    never holds a report lock while waiting on the classifier.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        content_store: ContentStore,
        classifier: ContentClassifier,
        *,
        thresholds: ModerationThresholds | None = None,
        policy: ModerationPolicy | None = None,
        identity_provider: IdentityProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
        ai_check_timeout: float = 10.0,
        enable_ai_moderation: bool = True,
        enable_community_voting: bool = True,
    ) -> None:
        """Initialize the moderation service.

        Args:
            session_factory: Factory for sessions on the report tables. Sessions
                must not expire objects on commit since reports are returned
                detached.
            content_store: Where reported content is looked up and updated.
            classifier: Automated content check run once per new report.
            thresholds: Resolution gates; defaults when omitted.
            policy: Reporting and voting policy; defaults when omitted.
            identity_provider: Fallback source of the acting identity.
            clock: Returns the current aware UTC time.
            ai_check_timeout: Seconds before a content check is abandoned.
            enable_ai_moderation: Whether new reports trigger a content check.
            enable_community_voting: Whether votes are accepted at all.
        """
        self._session_factory = session_factory
        self.content_store = content_store
        self.classifier = classifier
        self.thresholds = thresholds or ModerationThresholds()
        self.policy = policy or ModerationPolicy()
        self.identity_provider = identity_provider
        self._clock = clock
        self.ai_check_timeout = ai_check_timeout
        self.enable_ai_moderation = enable_ai_moderation
        self.enable_community_voting = enable_community_voting

        self._locks: dict[str, _ReportLock] = {}
        self._pending_checks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """Yield a session whose writes commit together or not at all."""
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error("Moderation transaction rolled back", exc_info=True)
            raise
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @asynccontextmanager
    async def _report_lock(self, report_id: str) -> AsyncIterator[None]:
        """Hold the lock for one report; the entry is dropped once nobody waits on it."""
        entry = self._locks.get(report_id)
        if entry is None:
            entry = _ReportLock()
            self._locks[report_id] = entry
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._locks.pop(report_id, None)

    def _resolve_identity(self, explicit_id: str | None) -> str:
        if explicit_id:
            return explicit_id
        if self.identity_provider is not None:
            identity = self.identity_provider.current_identity()
            if identity is not None and identity.user_id:
                return identity.user_id
        raise ValidationError("An authenticated identity is required")

    @staticmethod
    def _load_report(db: Session, report_id: str) -> Report:
        report = db.get(Report, report_id)
        if report is None:
            raise ReportNotFoundError(report_id)
        return report

    def _evaluate(self, report: Report, now: datetime) -> Resolution | None:
        tally = VoteTally.from_decisions(vote.decision for vote in report.votes)
        return evaluate_resolution(
            tally,
            report.ai_confidence,
            report.created_at,
            now,
            self.thresholds,
        )

    def _resolve(
        self,
        db: Session,
        report: Report,
        resolution: Resolution,
        now: datetime,
    ) -> ContentStatus | None:
        """Freeze the report and return the content status it implies."""
        report.status = resolution.status.value
        report.resolution_cause = resolution.cause.value
        report.resolved_at = now
        report.updated_at = now
        db.flush()

        logger.info(
            "Report %s resolved as %s (%s) with %d remove / %d keep votes",
            report.id,
            resolution.status.value,
            resolution.cause.value,
            report.remove_count,
            report.keep_count,
        )

        if resolution.status.value in _REMOVED_STATUSES:
            return ContentStatus.REMOVED

        siblings = db.scalars(
            select(Report.status).where(
                Report.content_id == report.content_id,
                Report.id != report.id,
            )
        ).all()
        if any(status in _REMOVED_STATUSES for status in siblings):
            # Removal by another report is never undone.
            return None
        if ReportStatus.PENDING.value in siblings:
            return None
        return ContentStatus.ACTIVE

    def _apply_content_status(self, content_id: str, status: ContentStatus | None) -> None:
        """Push a report outcome onto the content item.

        Only content still under review is returned to active. Failures are
        logged; the report outcome has already been committed.
        """
        if status is None:
            return
        try:
            if status == ContentStatus.ACTIVE:
                current = self.content_store.get_content(content_id)
                if current is None or current.status != ContentStatus.UNDER_REVIEW:
                    return
            self.content_store.set_content_status(content_id, status)
        except (ModerationError, SQLAlchemyError):
            logger.error(
                "Could not set content %s to %s",
                content_id,
                status.value,
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Report submission
    # ------------------------------------------------------------------

    async def submit_report(
        self,
        content_id: str,
        content_type: ContentType | str,
        reason: ReportReason | str,
        description: str = "",
        reporter_id: str | None = None,
    ) -> Report:
        """File a report against a content item.

        Args:
            content_id: Identifier of the reported item.
            content_type: post, comment or sphere.
            reason: One of ``ReportReason``.
            description: Optional rationale; required when reason is ``other``.
            reporter_id: Filing identity; the identity provider is used when omitted.

        Returns:
            The newly created pending report.

        Raises:
            ValidationError: Malformed input or missing identity.
            ContentNotFoundError: The content store does not know the item.
            SelfReportError: The reporter authored the content.
        """
        reporter = self._resolve_identity(reporter_id)
        reason_value = _coerce(ReportReason, reason, "reason")
        type_value = _coerce(ContentType, content_type, "content_type")

        description = (description or "").strip()
        if len(description) > self.policy.description_max_length:
            raise ValidationError(
                f"Description exceeds {self.policy.description_max_length} characters"
            )
        if reason_value is ReportReason.OTHER and not description:
            raise ValidationError("A description is required when the reason is 'other'")

        content = self.content_store.get_content(content_id)
        if content is None:
            raise ContentNotFoundError(content_id)
        if content.content_type != type_value:
            raise ValidationError(
                f"Content {content_id} is a {content.content_type.value}, not a {type_value.value}"
            )
        if self.policy.block_self_reports and content.author_id == reporter:
            raise SelfReportError("You cannot report your own content")

        now = self._clock()
        report = Report(
            id=_new_report_id(),
            content_id=content_id,
            content_type=type_value.value,
            sphere_id=content.sphere_id,
            reporter_id=reporter,
            reason=reason_value.value,
            description=description,
            status=ReportStatus.PENDING.value,
            resolution_cause=None,
            ai_confidence=None,
            ai_flags=[],
            moderator_notes=None,
            created_at=now,
            updated_at=now,
            resolved_at=None,
            votes=[],
        )
        with self._transaction() as db:
            db.add(report)

        logger.info(
            "Report %s filed against %s %s for %s",
            report.id,
            type_value.value,
            content_id,
            reason_value.value,
        )

        if self.enable_ai_moderation:
            self._schedule_content_check(report.id, content)

        if content.status == ContentStatus.ACTIVE:
            self._apply_content_status(content_id, ContentStatus.UNDER_REVIEW)

        return report

    # ------------------------------------------------------------------
    # Voting
    # ------------------------------------------------------------------

    async def submit_vote(
        self,
        report_id: str,
        decision: VoteDecision | str,
        voter_id: str | None = None,
    ) -> Report:
        """Record or replace a voter's decision and resolve if thresholds are met.

        Raises:
            ValidationError: Malformed decision, missing identity or voting disabled.
            ReportNotFoundError: Unknown report.
            ReportAlreadyResolvedError: The report is terminal.
            SelfVoteError: Policy bars this voter.
        """
        voter = self._resolve_identity(voter_id)
        decision_value = _coerce(VoteDecision, decision, "decision")
        if not self.enable_community_voting:
            raise ValidationError("Community voting is disabled")

        async with self._report_lock(report_id):
            with self._transaction() as db:
                report = self._load_report(db, report_id)
                if report.is_terminal:
                    raise ReportAlreadyResolvedError(report_id, report.status)
                self._check_vote_policy(report, voter)

                now = self._clock()
                existing = report.vote_of(voter)
                if existing is not None:
                    existing.decision = decision_value.value
                    existing.cast_at = now
                else:
                    report.votes.append(
                        ReportVote(voter_id=voter, decision=decision_value.value, cast_at=now)
                    )
                report.updated_at = now

                content_status = None
                resolution = self._evaluate(report, now)
                if resolution is not None:
                    content_status = self._resolve(db, report, resolution, now)

        logger.debug("Vote %s by %s recorded on report %s", decision_value.value, voter, report_id)
        self._apply_content_status(report.content_id, content_status)
        return report

    def _check_vote_policy(self, report: Report, voter: str) -> None:
        if self.policy.block_reporter_votes and report.reporter_id == voter:
            raise SelfVoteError("Reporters cannot vote on their own reports")
        if self.policy.block_author_votes:
            content = self.content_store.get_content(report.content_id)
            if content is not None and content.author_id == voter:
                raise SelfVoteError("Authors cannot vote on reports against their content")

    # ------------------------------------------------------------------
    # Automated content check
    # ------------------------------------------------------------------

    def _schedule_content_check(self, report_id: str, content: ContentRecord) -> None:
        task = asyncio.create_task(
            self._run_content_check(report_id, content),
            name=f"content-check-{report_id}",
        )
        self._pending_checks.add(task)
        task.add_done_callback(self._on_check_done)

    def _on_check_done(self, task: asyncio.Task[None]) -> None:
        self._pending_checks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Content check task %s failed", task.get_name(), exc_info=exc)

    async def _run_content_check(self, report_id: str, content: ContentRecord) -> None:
        try:
            result = await asyncio.wait_for(
                self.classifier.check_content(content.body, content.media_refs),
                timeout=self.ai_check_timeout,
            )
        except TimeoutError:
            logger.warning(
                "Content check for report %s timed out after %.1fs; falling back to votes",
                report_id,
                self.ai_check_timeout,
            )
            return
        except ClassifierUnavailableError as exc:
            logger.warning(
                "Content check for report %s unavailable; falling back to votes: %s",
                report_id,
                exc,
            )
            return

        await self.apply_content_check(report_id, result)

    async def apply_content_check(self, report_id: str, result: ContentCheckResult) -> Report:
        """Record an automated check result and resolve if it crosses the AI threshold.

        Results for terminal reports, and any result after the first, are
        discarded and the report is returned unchanged.

        Raises:
            ReportNotFoundError: Unknown report.
        """
        async with self._report_lock(report_id):
            with self._transaction() as db:
                report = self._load_report(db, report_id)
                if report.is_terminal:
                    logger.info(
                        "Discarding content check for report %s; already %s",
                        report_id,
                        report.status,
                    )
                    return report
                if report.ai_confidence is not None:
                    logger.warning("Discarding repeated content check for report %s", report_id)
                    return report

                now = self._clock()
                report.ai_confidence = result.confidence
                report.ai_flags = [flag.value for flag in result.flags]
                report.updated_at = now

                content_status = None
                resolution = self._evaluate(report, now)
                if resolution is not None:
                    content_status = self._resolve(db, report, resolution, now)

        logger.debug("Report %s content check confidence %.3f", report_id, result.confidence)
        self._apply_content_status(report.content_id, content_status)
        return report

    async def check_content(self, text: str, media_refs: Sequence[str] = ()) -> ContentCheckResult:
        """Run the classifier directly, e.g. before publishing content.

        Failures are logged and reported as a zero-confidence result.
        """
        try:
            return await asyncio.wait_for(
                self.classifier.check_content(text, media_refs),
                timeout=self.ai_check_timeout,
            )
        except (TimeoutError, ClassifierUnavailableError) as exc:
            logger.warning("Ad-hoc content check unavailable: %s", exc)
            return ContentCheckResult(confidence=0.0)

    async def drain_content_checks(self) -> None:
        """Wait for every outstanding background content check to finish."""
        while self._pending_checks:
            await asyncio.gather(*list(self._pending_checks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Expiry and annotation
    # ------------------------------------------------------------------

    async def expire_reports(self) -> list[Report]:
        """Resolve pending reports whose voting period has elapsed.

        Returns:
            The reports resolved by this sweep.
        """
        now = self._clock()
        cutoff = now - self.thresholds.voting_period
        with self._session_factory() as db:
            candidate_ids = db.scalars(
                select(Report.id).where(
                    Report.status == ReportStatus.PENDING.value,
                    Report.created_at <= cutoff,
                )
            ).all()

        resolved: list[Report] = []
        for report_id in candidate_ids:
            async with self._report_lock(report_id):
                content_status = None
                with self._transaction() as db:
                    report = self._load_report(db, report_id)
                    if report.is_terminal:
                        continue
                    evaluated_at = self._clock()
                    resolution = self._evaluate(report, evaluated_at)
                    if resolution is None:
                        continue
                    content_status = self._resolve(db, report, resolution, evaluated_at)
            self._apply_content_status(report.content_id, content_status)
            resolved.append(report)

        if resolved:
            logger.info("Expiry sweep resolved %d report(s)", len(resolved))
        return resolved

    async def annotate_report(self, report_id: str, notes: str | None) -> Report:
        """Set moderator notes on a report of any status.

        Raises:
            ValidationError: Notes exceed the configured bound.
            ReportNotFoundError: Unknown report.
        """
        notes = (notes or "").strip() or None
        if notes is not None and len(notes) > self.policy.notes_max_length:
            raise ValidationError(f"Notes exceed {self.policy.notes_max_length} characters")

        async with self._report_lock(report_id):
            with self._transaction() as db:
                report = self._load_report(db, report_id)
                report.moderator_notes = notes
                report.updated_at = self._clock()
        return report

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def get_report(self, report_id: str) -> Report:
        """Return a report by identifier.

        Raises:
            ReportNotFoundError: Unknown report.
        """
        with self._session_factory() as db:
            return self._load_report(db, report_id)

    def list_reports(
        self,
        report_filter: ReportFilter | None = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Report]:
        """Return reports matching ``report_filter``, newest first."""
        criteria = report_filter or ReportFilter()
        stmt = select(Report)
        if criteria.status is not None:
            stmt = stmt.where(Report.status == criteria.status.value)
        if criteria.content_id is not None:
            stmt = stmt.where(Report.content_id == criteria.content_id)
        if criteria.content_type is not None:
            stmt = stmt.where(Report.content_type == criteria.content_type.value)
        if criteria.reporter_id is not None:
            stmt = stmt.where(Report.reporter_id == criteria.reporter_id)
        if criteria.sphere_id is not None:
            stmt = stmt.where(Report.sphere_id == criteria.sphere_id)
        stmt = stmt.order_by(Report.created_at.desc(), Report.id).offset(offset).limit(limit)

        with self._session_factory() as db:
            return list(db.scalars(stmt).all())

    def get_voting_status(self, report_id: str, voter_id: str | None = None) -> VotingStatus:
        """Summarize the vote on a report, including the caller's own vote."""
        report = self.get_report(report_id)
        tally = VoteTally.from_decisions(vote.decision for vote in report.votes)

        user_vote = None
        if voter_id:
            vote = report.vote_of(voter_id)
            if vote is not None:
                user_vote = VoteDecision(vote.decision)

        if report.is_terminal:
            remaining = timedelta(0)
        else:
            remaining = max(
                timedelta(0),
                voting_deadline(report.created_at, self.thresholds) - self._clock(),
            )

        return VotingStatus(
            report_id=report.id,
            status=ReportStatus(report.status),
            total=tally.total,
            remove_count=tally.remove_count,
            keep_count=tally.keep_count,
            user_vote=user_vote,
            time_remaining=remaining,
        )

    def get_stats(self) -> ModerationStats:
        """Recompute statistics over every stored report."""
        with self._session_factory() as db:
            reports = db.scalars(select(Report)).all()
            return compute_stats(
                reports,
                ai_confidence_threshold=self.thresholds.ai_confidence_threshold,
            )

    def get_thresholds(self) -> ModerationThresholds:
        """Return the thresholds in force."""
        return self.thresholds


def _build_moderation_service() -> ModerationService:
    from whalebyte_moderation.db.session import SessionLocal

    return ModerationService(
        SessionLocal,
        SqlContentStore(SessionLocal),
        build_classifier(settings),
        thresholds=settings.moderation_thresholds,
        policy=settings.moderation_policy,
        ai_check_timeout=settings.ai_check_timeout_seconds,
        enable_ai_moderation=settings.enable_ai_moderation,
        enable_community_voting=settings.enable_community_voting,
    )


class _ModerationServiceSingleton:
    """Singleton wrapper for ModerationService."""

    _instance: ModerationService | None = None

    @classmethod
    def get_instance(cls) -> ModerationService:
        """Get or create the singleton ModerationService instance."""
        if cls._instance is None:
            cls._instance = _build_moderation_service()
        return cls._instance

    @classmethod
    def peek(cls) -> ModerationService | None:
        """Return the instance if one has been created."""
        return cls._instance


def get_moderation_service() -> ModerationService:
    """Return the process-wide moderation service built from settings."""
    return _ModerationServiceSingleton.get_instance()


def moderation_service_started() -> ModerationService | None:
    """Return the process-wide service without creating it."""
    return _ModerationServiceSingleton.peek()
