"""Optional in-process timer for scheduled publication.

Deployments without an external scheduler can set
``PUBLISH_SWEEP_INTERVAL_SECONDS`` and let this worker run the same sweep the
cron endpoint runs. Each tick uses a fresh session, and the sweep's
conditional updates keep it safe to run alongside the cron endpoint.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from novelhub.core.errors import StoreUnavailableError
from novelhub.core.settings import settings
from novelhub.db.session import SessionLocal
from novelhub.repositories.content_store import ContentStore
from novelhub.services.publishing import PublicationSweeper, SweepResult
from novelhub.services.views import ViewAccountingService

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 1.0
MAX_BACKOFF_SECONDS = 300.0


@dataclass
class SweepWorkerState:
    """Counters kept across ticks for the system endpoint."""

    ticks: int = 0
    published_total: int = 0
    consecutive_failures: int = 0


class PublishSweepWorker:
    """Periodically publishes due chapters and purges expired view credits."""

    def __init__(
        self,
        interval_seconds: float | None = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ) -> None:
        interval = settings.publish_sweep_interval_seconds if interval_seconds is None else interval_seconds
        self.interval = max(MIN_INTERVAL_SECONDS, float(interval))
        self.session_factory = session_factory
        self.state = SweepWorkerState()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())
            logger.info("Publish sweep worker started (every %.1fs)", self.interval)

    async def stop(self) -> None:
        """Stop the background loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            delay = self.interval
            try:
                await self.tick()
            except StoreUnavailableError as e:
                self.state.consecutive_failures += 1
                delay = min(self.interval * 2 ** self.state.consecutive_failures, MAX_BACKOFF_SECONDS)
                logger.warning("Publish sweep failed, retrying in %.0fs: %s", delay, e)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=delay)
            except asyncio.TimeoutError:
                continue

    async def tick(self) -> SweepResult:
        """Run one sweep and purge in a worker thread."""
        result = await asyncio.to_thread(self._run_once)
        self.state.ticks += 1
        self.state.published_total += result.published_count
        self.state.consecutive_failures = 0
        return result

    def _run_once(self) -> SweepResult:
        with self.session_factory() as db:
            store = ContentStore(db)
            result = PublicationSweeper(store).sweep()
            try:
                ViewAccountingService(store).purge_expired_credits()
            except SQLAlchemyError:
                logger.exception("Could not purge expired view credits")
        return result
