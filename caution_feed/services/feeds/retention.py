"""Retention sweep for caution items.

Hard-deletes items whose published date is older than the retention
horizon. Published dates never change after ingestion, so the sweep can
run alongside ingestion.
"""

from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from caution_feed.config.scheduling import RetentionConfig
from caution_feed.core.exceptions import RetentionSweepError
from caution_feed.core.logging import get_logger
from caution_feed.core.types import Clock, SessionFactory, utc_now
from caution_feed.models.caution_item import CautionItem, CautionItemPersona

logger = get_logger(__name__)


class RetentionSweeper:
    """Deletes caution items past the retention horizon."""

    def __init__(
        self,
        db_session_factory: SessionFactory,
        config: RetentionConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize retention sweeper.

        Args:
            db_session_factory: Database session factory
            config: Retention configuration (uses defaults if not provided)
            clock: Time source
        """
        self.db_session_factory = db_session_factory
        self.config = config or RetentionConfig()
        self.clock = clock

    async def purge_older_than(self, days: int | None = None) -> int:
        """Delete items published before now - days.

        Args:
            days: Retention horizon in days (defaults to config.retention_days)

        Returns:
            Number of caution items deleted

        Raises:
            RetentionSweepError: If the delete fails
        """
        days = self.config.retention_days if days is None else days
        cutoff = self.clock() - timedelta(days=days)

        try:
            async with self.db_session_factory() as session:
                stale_ids = select(CautionItem.id).where(CautionItem.published_date < cutoff)
                await session.execute(
                    delete(CautionItemPersona)
                    .where(CautionItemPersona.caution_item_id.in_(stale_ids))
                    .execution_options(synchronize_session=False)
                )
                result = await session.execute(
                    delete(CautionItem)
                    .where(CautionItem.published_date < cutoff)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Retention sweep failed", retention_days=days, error=str(e))
            raise RetentionSweepError(
                f"Failed to purge caution items: {e}", retention_days=days
            ) from e

        deleted = result.rowcount or 0
        logger.info(
            "Cleaned up old caution items",
            deleted=deleted,
            retention_days=days,
            cutoff=cutoff.isoformat(),
        )
        return deleted


__all__ = ["RetentionSweeper"]
