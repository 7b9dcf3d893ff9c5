"""Deduplicating caution item ingestion.

This module persists one source's batch of raw entries as caution items.
The (source_id, link) pair identifies an item; entries whose key is
already stored are skipped, so re-polling a source is idempotent.

Each entry is committed on its own. A uniqueness violation means a
concurrent poll stored the entry first and is counted as a duplicate;
any other write failure is collected in the result and the batch
continues.
"""

from collections.abc import Collection, Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from caution_feed.core.exceptions import ConfigValidationError, ItemPersistError
from caution_feed.core.logging import get_logger
from caution_feed.core.types import Clock, SessionFactory, utc_now
from caution_feed.models.caution_item import CautionItem
from caution_feed.services.feeds.base import FeedSourceInfo, IngestResult, RawEntry
from caution_feed.services.feeds.classifier import classify

logger = get_logger(__name__)

_TITLE_MAX = 500


class DeduplicatingIngester:
    """Stores new entries for a source and skips already-seen ones.

    Attributes:
        db_session_factory: Database session factory
        known_personas: Accepted persona identifiers (None disables the check)
        clock: Time source for ingestion timestamps
    """

    def __init__(
        self,
        db_session_factory: SessionFactory,
        known_personas: Collection[str] | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize ingester.

        Args:
            db_session_factory: Database session factory
            known_personas: Accepted persona identifiers
            clock: Time source for ingestion timestamps
        """
        self.db_session_factory = db_session_factory
        self.known_personas = frozenset(known_personas) if known_personas is not None else None
        self.clock = clock

    async def ingest(self, source: FeedSourceInfo, entries: Sequence[RawEntry]) -> IngestResult:
        """Persist the new entries of one source, in the given order.

        Args:
            source: Source snapshot; category and personas are copied from it
            entries: Raw entries in fetched order

        Returns:
            IngestResult with new/duplicate counts and per-entry errors

        Raises:
            ConfigValidationError: If the source carries unknown personas
        """
        self._check_personas(source)
        result = IngestResult(source_id=source.id)
        ingested_at = self.clock()

        async with self.db_session_factory() as session:
            for entry in entries:
                try:
                    existing = await session.scalar(
                        select(CautionItem.id).where(
                            CautionItem.source_id == source.id,
                            CautionItem.link == entry.link,
                        )
                    )
                    if existing is not None:
                        result.duplicate_count += 1
                        continue

                    session.add(self._build_item(source, entry, ingested_at))
                    await session.commit()
                    result.new_count += 1

                except IntegrityError:
                    await session.rollback()
                    result.duplicate_count += 1
                    logger.debug(
                        "Entry stored concurrently, treating as duplicate",
                        source_id=str(source.id),
                        link=entry.link,
                    )
                except SQLAlchemyError as e:
                    await session.rollback()
                    error = ItemPersistError(entry.link, e, context={"source_id": str(source.id)})
                    result.errors.append(error)
                    logger.warning(
                        "Failed to persist caution item",
                        source_id=str(source.id),
                        source_name=source.name,
                        link=entry.link,
                        error=str(e),
                    )

        logger.info(
            "Ingested feed batch",
            source_id=str(source.id),
            source_name=source.name,
            entries=len(entries),
            new_count=result.new_count,
            duplicate_count=result.duplicate_count,
            error_count=result.error_count,
        )
        return result

    def _check_personas(self, source: FeedSourceInfo) -> None:
        if self.known_personas is None:
            return
        unknown = [p for p in source.personas if p not in self.known_personas]
        if unknown:
            raise ConfigValidationError(
                field="personas",
                value=unknown,
                reason=f"unknown persona identifiers on source {source.name}",
            )

    def _build_item(
        self, source: FeedSourceInfo, entry: RawEntry, ingested_at: datetime
    ) -> CautionItem:
        """Build a classified caution item from a raw entry.

        Args:
            source: Source snapshot
            entry: Raw entry
            ingested_at: Fallback publish time

        Returns:
            Unsaved CautionItem
        """
        classification = classify(entry.title, entry.summary)
        item = CautionItem(
            source_id=source.id,
            title=entry.title[:_TITLE_MAX],
            description=entry.summary,
            content=entry.content,
            category=source.category,
            severity=classification.severity,
            published_date=entry.published_at or ingested_at,
            link=entry.link,
            source_name=source.source_label,
            source_url=source.url,
            tags=list(classification.tags),
            is_active=True,
            view_count=0,
        )
        item.set_personas(list(source.personas))
        return item


__all__ = ["DeduplicatingIngester"]
