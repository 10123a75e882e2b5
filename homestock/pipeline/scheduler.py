"""
Homestock — Price Fetch Scheduler

Runs the daily platform price fetch on a configurable cadence
(PRICE_FETCH_INTERVAL_HOURS, 24 by default). The first run happens on
startup so a fresh deployment has today's prices without waiting a day.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from homestock.config import settings
from homestock.pipeline.price_fetch import PriceFetchSummary, run_price_fetch

logger = structlog.get_logger(__name__)


class Scheduler:
    """
    Async scheduler for the price fetch job.

    A failed run is logged and retried at the next cadence tick; it never
    stops the loop.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self._shutdown_event = asyncio.Event()

        self._price_fetch_last_run: datetime | None = None
        self._price_fetch_cadence_minutes = settings.PRICE_FETCH_INTERVAL_HOURS * 60

    async def shutdown(self) -> None:
        """Signal graceful shutdown to the scheduler loop."""
        logger.info("scheduler_shutdown_requested")
        self._shutdown_event.set()

    def _should_fetch_prices(self) -> bool:
        """Check if the price fetch window has elapsed."""
        if self._price_fetch_last_run is None:
            return True
        now = datetime.now(timezone.utc)
        elapsed_minutes = (now - self._price_fetch_last_run).total_seconds() / 60
        return elapsed_minutes >= self._price_fetch_cadence_minutes

    async def _fetch_prices(self) -> PriceFetchSummary | None:
        """
        Run one price fetch.

        Returns:
            The run summary, or None if the run failed.
        """
        logger.info("scheduler_price_fetch_start")
        summary: PriceFetchSummary | None = None
        try:
            summary = await run_price_fetch(self.session_factory)
        except Exception as e:
            logger.error(
                "scheduler_price_fetch_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            self._price_fetch_last_run = datetime.now(timezone.utc)

        if summary is not None:
            logger.info(
                "scheduler_price_fetch_complete",
                items_checked=summary.items_checked,
                prices_saved=summary.prices_saved,
                next_run_in_hours=settings.PRICE_FETCH_INTERVAL_HOURS,
            )
        return summary

    async def run(self) -> None:
        """
        Main scheduler loop. Runs until shutdown is signaled.
        """
        logger.info(
            "scheduler_started",
            price_fetch_cadence_hours=settings.PRICE_FETCH_INTERVAL_HOURS,
        )

        poll_check_interval = 5

        try:
            while not self._shutdown_event.is_set():
                try:
                    if self._should_fetch_prices():
                        await self._fetch_prices()

                    await asyncio.wait_for(
                        self._shutdown_event.wait(),
                        timeout=poll_check_interval,
                    )
                except asyncio.TimeoutError:
                    # No shutdown signal within the interval
                    continue

        except asyncio.CancelledError:
            logger.info("scheduler_cancelled")
            raise
        finally:
            logger.info("scheduler_stopped")
