# tests/services/test_expiry_worker.py
import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from whalebyte_moderation.models.report import ReportStatus
from whalebyte_moderation.services.expiry import ExpirySweepWorker


@pytest.mark.asyncio
async def test_run_once_expires_stale_reports(moderation_service, clock, test_post) -> None:
    report = await moderation_service.submit_report("post-1", "post", "spam", reporter_id="r1")
    worker = ExpirySweepWorker(moderation_service, interval_seconds=60)

    assert await worker.run_once() == 0

    clock.advance(days=1)
    assert await worker.run_once() == 1
    assert moderation_service.get_report(report.id).status == ReportStatus.REJECTED.value


@pytest.mark.asyncio
async def test_worker_start_and_stop(moderation_service, clock, test_post) -> None:
    report = await moderation_service.submit_report("post-1", "post", "spam", reporter_id="r1")
    clock.advance(days=2)
    worker = ExpirySweepWorker(moderation_service, interval_seconds=0.1)

    await worker.start()
    assert worker.running
    await asyncio.sleep(0.05)
    await worker.stop()

    assert not worker.running
    assert moderation_service.get_report(report.id).status == ReportStatus.REJECTED.value


@pytest.mark.asyncio
async def test_worker_survives_database_errors(mocker, moderation_service) -> None:
    calls = []

    async def flaky_sweep():
        calls.append(1)
        if len(calls) == 1:
            raise OperationalError("SELECT", {}, Exception("database is locked"))
        return []

    mocker.patch.object(moderation_service, "expire_reports", side_effect=flaky_sweep)
    worker = ExpirySweepWorker(moderation_service, interval_seconds=0.1)

    await worker.start()
    await asyncio.sleep(0.15)
    await worker.stop()

    assert len(calls) >= 2
    assert not worker.running
