"""Moderation-related endpoints for the WhaleByte API."""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Query, status

from whalebyte_moderation.api.v1.dependencies import (
    CurrentIdentityDep,
    ModerationServiceDep,
    OptionalIdentityDep,
)
from whalebyte_moderation.models.content import ContentType
from whalebyte_moderation.models.report import Report, ReportStatus
from whalebyte_moderation.schemas.moderation import (
    ContentCheckRequest,
    ContentCheckResponse,
    ModerationStatsResponse,
    ModeratorNotesUpdate,
    ReportCreate,
    ReportResponse,
    ThresholdsResponse,
    VoteCreate,
    VotingStatusResponse,
)
from whalebyte_moderation.services.errors import (
    AlreadyResolvedError,
    ModerationError,
    NotFoundError,
    SelfReportError,
    SelfVoteError,
    ValidationError,
)
from whalebyte_moderation.services.moderation import ReportFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/moderation", tags=["moderation"])


def _raise_http(exc: ModerationError) -> NoReturn:
    """Translate a moderation failure into an HTTP error."""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AlreadyResolvedError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, SelfReportError | SelfVoteError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        logger.error("Unhandled moderation error: %s", exc)
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=str(exc)) from exc


@router.post("/reports", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportCreate,
    identity: CurrentIdentityDep,
    service: ModerationServiceDep,
) -> Report:
    """File a report against a post, comment or sphere."""
    try:
        return await service.submit_report(
            payload.content_id,
            payload.content_type,
            payload.reason,
            payload.description,
            reporter_id=identity.user_id,
        )
    except ModerationError as exc:
        _raise_http(exc)


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(
    service: ModerationServiceDep,
    report_status: ReportStatus | None = Query(None, alias="status"),
    content_id: str | None = Query(None),
    content_type: ContentType | None = Query(None),
    reporter_id: str | None = Query(None),
    sphere_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[Report]:
    """List reports, newest first, optionally filtered."""
    report_filter = ReportFilter(
        status=report_status,
        content_id=content_id,
        content_type=content_type,
        reporter_id=reporter_id,
        sphere_id=sphere_id,
    )
    return service.list_reports(report_filter, limit=limit, offset=offset)


@router.post("/reports/expire", response_model=list[ReportResponse])
async def expire_reports(
    _identity: CurrentIdentityDep,
    service: ModerationServiceDep,
) -> list[Report]:
    """Resolve every pending report whose voting period has elapsed."""
    return await service.expire_reports()


@router.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str, service: ModerationServiceDep) -> Report:
    """Return a single report."""
    try:
        return service.get_report(report_id)
    except ModerationError as exc:
        _raise_http(exc)


@router.post(
    "/reports/{report_id}/votes",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def vote_on_report(
    report_id: str,
    payload: VoteCreate,
    identity: CurrentIdentityDep,
    service: ModerationServiceDep,
) -> Report:
    """Cast or replace the caller's vote on a pending report."""
    try:
        return await service.submit_vote(report_id, payload.decision, voter_id=identity.user_id)
    except ModerationError as exc:
        _raise_http(exc)


@router.get("/reports/{report_id}/voting-status", response_model=VotingStatusResponse)
async def get_voting_status(
    report_id: str,
    identity: OptionalIdentityDep,
    service: ModerationServiceDep,
) -> VotingStatusResponse:
    """Return the tally, the caller's vote and the time left to vote."""
    try:
        voting_status = service.get_voting_status(
            report_id,
            voter_id=identity.user_id if identity else None,
        )
    except ModerationError as exc:
        _raise_http(exc)
    return VotingStatusResponse.from_status(voting_status)


@router.put("/reports/{report_id}/notes", response_model=ReportResponse)
async def annotate_report(
    report_id: str,
    payload: ModeratorNotesUpdate,
    _identity: CurrentIdentityDep,
    service: ModerationServiceDep,
) -> Report:
    """Set moderator notes on a report."""
    try:
        return await service.annotate_report(report_id, payload.notes)
    except ModerationError as exc:
        _raise_http(exc)


@router.post("/check", response_model=ContentCheckResponse)
async def check_content(
    payload: ContentCheckRequest,
    service: ModerationServiceDep,
) -> ContentCheckResponse:
    """Run the automated content check on arbitrary text and media."""
    result = await service.check_content(payload.text, payload.media_refs)
    return ContentCheckResponse(
        is_allowed=result.is_allowed(service.thresholds.ai_confidence_threshold),
        confidence=result.confidence,
        flags=list(result.flags),
    )


@router.get("/stats", response_model=ModerationStatsResponse)
async def get_stats(service: ModerationServiceDep) -> ModerationStatsResponse:
    """Return aggregate moderation statistics."""
    return ModerationStatsResponse.model_validate(service.get_stats())


@router.get("/thresholds", response_model=ThresholdsResponse)
async def get_thresholds(service: ModerationServiceDep) -> ThresholdsResponse:
    """Return the resolution thresholds in force."""
    thresholds = service.get_thresholds()
    return ThresholdsResponse(
        min_votes_required=thresholds.min_votes_required,
        removal_threshold=thresholds.removal_threshold,
        ai_confidence_threshold=thresholds.ai_confidence_threshold,
        voting_period_seconds=thresholds.voting_period.total_seconds(),
    )
