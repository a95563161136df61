"""
APScheduler job for background sync.

Runs a full Peloton → Garmin sync every `sync_interval_hours`. The job is
limited to one running instance so two syncs never touch the status row
at the same time.
"""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from p2g.config import get_settings

logger = logging.getLogger(__name__)


def build_scheduler(engine) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        engine: SQLAlchemy engine to pass to the sync service.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        _scheduled_sync,
        trigger="interval",
        hours=settings.sync_interval_hours,
        id="periodic_sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        kwargs={"engine": engine},
    )

    return scheduler


async def _scheduled_sync(engine) -> None:
    """Interval job: sync the most recent `peloton_num_workouts` workouts."""
    from p2g.sync.factory import open_sync_service

    settings = get_settings()
    logger.info("Scheduled sync starting")

    try:
        async with open_sync_service(engine=engine, settings=settings) as service:
            response = await service.sync(settings.peloton_num_workouts)
    except Exception as exc:
        logger.error("Scheduled sync failed: %s", exc)
        return

    if response.sync_success:
        logger.info("Scheduled sync succeeded")
    else:
        logger.warning("Scheduled sync failed: %s", "; ".join(response.errors))
