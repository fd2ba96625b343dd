"""APScheduler job definition for periodic exports."""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from catalog_export.worker.tasks import ExportTaskRunner

logger = logging.getLogger(__name__)

EXPORT_JOB_ID = "catalog_export"


def setup_scheduler(runner: ExportTaskRunner, interval_minutes: int) -> AsyncIOScheduler:
    """
    Setup and configure APScheduler.

    The export job runs immediately and then every ``interval_minutes``.
    A run that is still going when the next one is due is not overlapped.

    Args:
        runner: Export runner to invoke
        interval_minutes: Minutes between export starts

    Returns:
        Configured (not yet started) scheduler
    """
    if interval_minutes < 1:
        raise ValueError(f"Export interval must be at least 1 minute, got {interval_minutes}")

    scheduler = AsyncIOScheduler()

    async def export_job():
        try:
            await runner.run_export()
        except Exception:
            logger.exception("Scheduled export failed")

    scheduler.add_job(
        export_job,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=EXPORT_JOB_ID,
        name="Export catalog categories",
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(timezone.utc),
        replace_existing=True,
    )

    logger.info(f"Scheduled export every {interval_minutes} minutes")
    return scheduler
