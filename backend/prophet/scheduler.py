"""Job scheduler using APScheduler."""

import asyncio
import logging
from typing import NoReturn

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from prophet.config import Settings
from prophet.database.session import dispose_engine
from prophet.services.arbitration_service import SweepReport, arbitration_service

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "ai-arbitration-sweep"


async def run_ai_sweep() -> SweepReport:
    """One AI arbitration sweep over every overdue AI bet."""
    return await arbitration_service.sweep()


def ai_sweep_job() -> None:
    """Scheduler job wrapper for the blocking scheduler."""

    async def _run() -> SweepReport:
        try:
            return await run_ai_sweep()
        finally:
            # Pooled connections belong to this job's event loop
            await dispose_engine()

    try:
        report = asyncio.run(_run())
        logger.info(f"AI sweep: {len(report.resolved)}/{report.checked} bets resolved")
    except Exception as exc:
        logger.error(f"AI sweep failed: {exc}", exc_info=True)


def create_app_scheduler(settings: Settings) -> AsyncIOScheduler:
    """Scheduler that shares the API server's event loop."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_ai_sweep,
        IntervalTrigger(minutes=settings.scheduler.sweep_interval_minutes),
        id=SWEEP_JOB_ID,
        name="Arbitrator: AI Sweep",
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        f"Registered job: AI Sweep (every {settings.scheduler.sweep_interval_minutes} min)"
    )
    return scheduler


def start_scheduler(settings: Settings) -> NoReturn:
    """Run the sweep on its own, outside the API server."""
    scheduler = BlockingScheduler()

    scheduler.add_job(
        ai_sweep_job,
        IntervalTrigger(minutes=settings.scheduler.sweep_interval_minutes),
        id=SWEEP_JOB_ID,
        name="Arbitrator: AI Sweep",
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        f"Registered job: AI Sweep (every {settings.scheduler.sweep_interval_minutes} min)"
    )

    try:
        logger.info("Scheduler starting...")
        logger.info(f"{len(scheduler.get_jobs())} jobs registered")
        logger.info("Press Ctrl+C to stop\n")

        scheduler.start()

    except (KeyboardInterrupt, SystemExit):
        logger.info("\nReceived interrupt signal")
        scheduler.shutdown()
        logger.info("Scheduler stopped cleanly")
