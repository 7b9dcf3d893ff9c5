"""Feed sweep Celery tasks.

Celery beat drives the same sweeps as the in-process scheduler when
SCHEDULER_ENABLED=false. Each task runs one sweep on its own event loop;
concurrent workers polling the same source are kept consistent by the
(source_id, link) unique constraint.

Tasks:
- poll_feed_sources: Poll every due source once
- purge_stale_cautions: Delete items past the retention horizon
"""

import asyncio
from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger

from caution_feed.core.container import TaskScope
from caution_feed.core.database import close_db
from caution_feed.core.exceptions import RetentionSweepError
from caution_feed.services.feeds.base import SweepReport

logger = get_task_logger(__name__)


async def _poll_feed_sources_async(ignore_interval: bool) -> SweepReport:
    """Run one poll sweep with services built from the container.

    Args:
        ignore_interval: Poll all active sources regardless of interval

    Returns:
        SweepReport
    """
    with TaskScope() as scope:
        scheduler = scope.feed_scheduler()
        try:
            return await scheduler.run_poll_sweep(ignore_interval=ignore_interval)
        finally:
            await scope.http_client().close()
            await close_db(scope.infrastructure.db_engine())


async def _purge_stale_cautions_async(days: int | None) -> int:
    """Run one retention sweep with services built from the container.

    Args:
        days: Retention horizon override

    Returns:
        Deleted item count
    """
    with TaskScope() as scope:
        sweeper = scope.services.retention_sweeper()
        try:
            return await sweeper.purge_older_than(days)
        finally:
            await close_db(scope.infrastructure.db_engine())


@shared_task(
    bind=True,
    name="caution_feed.workers.feeds.poll_feed_sources",
    max_retries=3,
    default_retry_delay=60,
)
def poll_feed_sources(self, ignore_interval: bool = False) -> dict[str, Any]:
    """Poll every due feed source once.

    Per-source failures are part of the report; only a skipped sweep
    (registry unreachable) is retried.

    Args:
        ignore_interval: Poll all active sources regardless of interval

    Returns:
        SweepReport as dict
    """
    logger.info("Starting feed poll sweep")

    report = asyncio.run(_poll_feed_sources_async(ignore_interval))

    if report.skipped:
        logger.error(f"Feed poll sweep skipped: {report.error}")
        raise self.retry(exc=RuntimeError(report.error))

    logger.info(
        f"Feed poll sweep complete: {report.new_count} new items "
        f"from {len(report.results)} sources, {len(report.failed)} failed"
    )
    return report.model_dump(mode="json")


@shared_task(
    bind=True,
    name="caution_feed.workers.feeds.purge_stale_cautions",
    max_retries=3,
    default_retry_delay=600,
)
def purge_stale_cautions(self, days: int | None = None) -> dict[str, Any]:
    """Delete caution items past the retention horizon.

    Args:
        days: Retention horizon override (defaults to FEED_RETENTION_DAYS)

    Returns:
        Dict with deleted count
    """
    logger.info("Starting retention sweep")

    try:
        deleted = asyncio.run(_purge_stale_cautions_async(days))
    except RetentionSweepError as exc:
        logger.error(f"Retention sweep failed: {exc}", exc_info=True)
        raise self.retry(exc=exc) from exc

    logger.info(f"Retention sweep complete: {deleted} items deleted")
    return {"deleted": deleted}


__all__ = [
    "poll_feed_sources",
    "purge_stale_cautions",
]
