"""
APScheduler Configuration

Manages periodic maintenance jobs for the content hierarchy.
"""
import logging
import time
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from teachhub.config import ORPHAN_SWEEP_CRON_MINUTE
from teachhub.database import AsyncSessionLocal
from teachhub.services.cascade import sweep_orphans
from teachhub.services.storage import purge_files

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def sweep_orphaned_content():
    """
    Hourly job removing sections, lessons, notes and enrollments whose parent is gone.

    Cascade deletes through the API are transactional; this catches rows
    orphaned by anything else. Logs a per-table summary.
    """
    logger.info("Starting hourly orphan sweep")
    start_time = time.time()

    try:
        async with AsyncSessionLocal() as session:
            report = await sweep_orphans(session)

        failed = await purge_files(report.storage_keys)
        duration_ms = (time.time() - start_time) * 1000

        removed = sum(report.as_dict().values())
        logger.info(f"Orphan sweep removed {removed} rows in {duration_ms:.2f}ms: {report.as_dict()}")

        if failed:
            logger.warning(f"Orphan sweep could not delete {len(failed)} stored files")

    except Exception as e:
        logger.error(f"Failed to sweep orphaned content: {e}", exc_info=True)


def configure_scheduler():
    """
    Configure APScheduler with all scheduled jobs.

    Jobs:
        - Orphan sweep: Every hour at ORPHAN_SWEEP_CRON_MINUTE
    """
    scheduler.add_job(
        sweep_orphaned_content,
        trigger=CronTrigger(hour='*', minute=ORPHAN_SWEEP_CRON_MINUTE),
        id='orphan_sweep',
        name='Sweep Orphaned Content',
        replace_existing=True,
        coalesce=True,  # Combine missed runs into single execution
        max_instances=1  # Only one instance at a time
    )

    logger.info("Scheduler configured with orphan sweep job")


def start_scheduler():
    """Start the APScheduler"""
    configure_scheduler()
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler():
    """Stop the APScheduler"""
    if scheduler.running:
        scheduler.shutdown()
    logger.info("Scheduler stopped")
