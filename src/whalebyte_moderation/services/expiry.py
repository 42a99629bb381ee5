"""Background sweep resolving reports whose voting period has elapsed."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from whalebyte_moderation.services.errors import ModerationError
from whalebyte_moderation.services.moderation import ModerationService

logger = logging.getLogger(__name__)


class ExpirySweepWorker:
    """Periodically runs ``ModerationService.expire_reports``.

    Without a sweep, a report that stops receiving votes would never reach
    its voting-period deadline evaluation.
    """

    def __init__(self, service: ModerationService, interval_seconds: float = 60.0) -> None:
        self.service = service
        self.interval = max(0.1, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> int:
        """Run a single sweep and return how many reports it resolved."""
        resolved = await self.service.expire_reports()
        return len(resolved)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except (SQLAlchemyError, ModerationError) as e:
                logger.warning("ExpirySweepWorker encountered error: %s", e)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                continue
