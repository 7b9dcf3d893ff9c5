"""Feed source registry.

Query and bookkeeping surface over the feed_sources table. Sources are
handed out as FeedSourceInfo snapshots; store failures are raised as
StoreUnavailableError.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from caution_feed.config.sources import FeedSourceConfig
from caution_feed.core.exceptions import RecordNotFoundError, StoreUnavailableError
from caution_feed.core.logging import get_logger
from caution_feed.core.types import SessionFactory, ensure_utc
from caution_feed.models.source import FeedSource
from caution_feed.services.feeds.base import FeedSourceInfo

logger = get_logger(__name__)


class SourceRegistry:
    """Configured feed sources and their poll bookkeeping.

    Example:
        >>> registry = SourceRegistry(session_factory)
        >>> due = await registry.list_due_sources(datetime.now(UTC))
        >>> await registry.mark_fetched(due[0].id, datetime.now(UTC))
    """

    def __init__(self, db_session_factory: SessionFactory) -> None:
        """Initialize source registry.

        Args:
            db_session_factory: Database session factory
        """
        self.db_session_factory = db_session_factory

    async def list_active(self) -> list[FeedSourceInfo]:
        """List all active sources.

        Returns:
            Active source snapshots ordered by name

        Raises:
            StoreUnavailableError: If the store cannot be queried
        """
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(
                    select(FeedSource)
                    .where(FeedSource.is_active.is_(True))
                    .order_by(FeedSource.name, FeedSource.id)
                )
                sources = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to list feed sources: {e}", operation="select"
            ) from e

        return [FeedSourceInfo.model_validate(source) for source in sources]

    async def list_due_sources(self, now: datetime) -> list[FeedSourceInfo]:
        """List active sources whose poll interval has elapsed.

        Args:
            now: Current time

        Returns:
            Sources never fetched or fetched at least one interval ago

        Raises:
            StoreUnavailableError: If the store cannot be queried
        """
        now = ensure_utc(now)
        due = [source for source in await self.list_active() if source.is_due(now)]
        logger.debug("Due sources resolved", due=len(due))
        return due

    async def get(self, source_id: uuid.UUID) -> FeedSourceInfo:
        """Get one source.

        Args:
            source_id: Source UUID

        Returns:
            Source snapshot

        Raises:
            RecordNotFoundError: If no such source exists
            StoreUnavailableError: If the store cannot be queried
        """
        try:
            async with self.db_session_factory() as session:
                source = await session.get(FeedSource, source_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to load feed source: {e}", operation="select"
            ) from e

        if source is None:
            raise RecordNotFoundError(model="FeedSource", record_id=str(source_id))
        return FeedSourceInfo.model_validate(source)

    async def mark_fetched(self, source_id: uuid.UUID, at: datetime) -> None:
        """Record a fetch attempt.

        Called after every attempt, successful or not, so a source that
        keeps failing waits out its interval instead of being retried on
        every tick.

        Args:
            source_id: Source UUID
            at: Fetch time

        Raises:
            StoreUnavailableError: If the update fails
        """
        try:
            async with self.db_session_factory() as session:
                await session.execute(
                    update(FeedSource)
                    .where(FeedSource.id == source_id)
                    .values(last_fetched_at=ensure_utc(at))
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to mark feed source fetched: {e}", operation="update"
            ) from e

    async def set_active(self, source_id: uuid.UUID, active: bool) -> FeedSourceInfo:
        """Activate or deactivate a source.

        Args:
            source_id: Source UUID
            active: New active flag

        Returns:
            Updated source snapshot

        Raises:
            RecordNotFoundError: If no such source exists
            StoreUnavailableError: If the update fails
        """
        try:
            async with self.db_session_factory() as session:
                source = await session.get(FeedSource, source_id)
                if source is None:
                    raise RecordNotFoundError(model="FeedSource", record_id=str(source_id))
                source.is_active = active
                await session.commit()
                snapshot = FeedSourceInfo.model_validate(source)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to update feed source: {e}", operation="update"
            ) from e

        logger.info("Feed source active flag changed", source_id=str(source_id), active=active)
        return snapshot

    async def upsert_sources(self, configs: Iterable[FeedSourceConfig]) -> tuple[int, int]:
        """Create or update sources from seed configuration, keyed by URL.

        Poll bookkeeping (last_fetched_at) is left untouched on update.

        Args:
            configs: Validated source configurations

        Returns:
            Tuple of (created, updated) counts

        Raises:
            StoreUnavailableError: If the write fails
        """
        created = updated = 0
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(select(FeedSource))
                existing = {source.url: source for source in result.scalars().all()}

                for config in configs:
                    url = str(config.url)
                    values = {
                        "name": config.name,
                        "category": config.category,
                        "personas": list(config.personas),
                        "poll_interval_ms": config.poll_interval_ms,
                        "source_label": config.source_label,
                        "is_active": config.active,
                    }
                    source = existing.get(url)
                    if source is None:
                        source = FeedSource(url=url, **values)
                        session.add(source)
                        existing[url] = source
                        created += 1
                    else:
                        for key, value in values.items():
                            setattr(source, key, value)
                        updated += 1

                await session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to upsert feed sources: {e}", operation="upsert"
            ) from e

        logger.info("Feed sources upserted", created=created, updated=updated)
        return created, updated


__all__ = ["SourceRegistry"]
