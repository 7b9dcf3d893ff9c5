"""Read access to persisted caution items.

Serves the persona feed, detail lookups and dashboard statistics. Only
active items are visible to persona queries and statistics.
"""

import uuid
from datetime import datetime, timedelta

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from caution_feed.core.exceptions import RecordNotFoundError, StoreUnavailableError
from caution_feed.core.logging import get_logger
from caution_feed.core.types import Clock, SessionFactory, ensure_utc, utc_now
from caution_feed.models.caution_item import CautionItem, CautionItemPersona, Severity
from caution_feed.models.source import CautionCategory
from caution_feed.services.feeds.base import (
    CautionItemView,
    CautionPage,
    PersonaStats,
    SourceRef,
)

logger = get_logger(__name__)

RECENT_WINDOW = timedelta(days=7)


def to_view(item: CautionItem) -> CautionItemView:
    """Convert an ORM item to its API representation.

    Args:
        item: Loaded CautionItem (persona links included)

    Returns:
        CautionItemView
    """
    return CautionItemView(
        id=item.id,
        title=item.title,
        description=item.description,
        category=item.category,
        severity=item.severity,
        personas=item.personas,
        source=SourceRef(name=item.source_name, url=item.source_url),
        published_date=item.published_date,
        link=item.link,
        tags=list(item.tags or []),
        view_count=item.view_count,
    )


def _persona_filter(persona_id: str) -> ColumnElement[bool]:
    return CautionItem.id.in_(
        select(CautionItemPersona.caution_item_id).where(CautionItemPersona.persona == persona_id)
    )


class FeedReadStore:
    """Query surface for the persona caution feed.

    Example:
        >>> store = FeedReadStore(session_factory)
        >>> page = await store.query("senior", limit=20, offset=0)
        >>> page.total
        42
    """

    def __init__(self, db_session_factory: SessionFactory, clock: Clock = utc_now) -> None:
        """Initialize read store.

        Args:
            db_session_factory: Database session factory
            clock: Time source for the recent-items window
        """
        self.db_session_factory = db_session_factory
        self.clock = clock

    async def query(
        self,
        persona_id: str,
        limit: int,
        offset: int = 0,
        category: CautionCategory | None = None,
        severity: Severity | None = None,
        published_after: datetime | None = None,
    ) -> CautionPage:
        """Fetch one page of active items for a persona.

        Ordered by published date descending, then id descending, so pages
        are stable even when publish timestamps collide.

        Args:
            persona_id: Persona identifier the items must carry
            limit: Page size (>= 1)
            offset: Items to skip (>= 0)
            category: Optional category filter
            severity: Optional severity filter
            published_after: Optional inclusive lower bound on published date

        Returns:
            CautionPage with the page items and the total match count

        Raises:
            ValueError: If limit or offset is out of range
            StoreUnavailableError: If the store cannot be queried
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        conditions = [CautionItem.is_active.is_(True), _persona_filter(persona_id)]
        if category is not None:
            conditions.append(CautionItem.category == category)
        if severity is not None:
            conditions.append(CautionItem.severity == severity)
        if published_after is not None:
            conditions.append(CautionItem.published_date >= ensure_utc(published_after))

        try:
            async with self.db_session_factory() as session:
                total = await session.scalar(
                    select(func.count()).select_from(CautionItem).where(*conditions)
                )
                result = await session.execute(
                    select(CautionItem)
                    .where(*conditions)
                    .order_by(CautionItem.published_date.desc(), CautionItem.id.desc())
                    .limit(limit)
                    .offset(offset)
                )
                items = [to_view(item) for item in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to query caution items: {e}", operation="select"
            ) from e

        return CautionPage(items=items, total=total or 0)

    async def stats_by_persona(self, persona_id: str) -> PersonaStats:
        """Summarize active items for a persona.

        Args:
            persona_id: Persona identifier

        Returns:
            PersonaStats with severity/category breakdowns and counts

        Raises:
            StoreUnavailableError: If the store cannot be queried
        """
        conditions = [CautionItem.is_active.is_(True), _persona_filter(persona_id)]
        recent_since = self.clock() - RECENT_WINDOW

        try:
            async with self.db_session_factory() as session:
                severity_rows = await session.execute(
                    select(CautionItem.severity, func.count())
                    .where(*conditions)
                    .group_by(CautionItem.severity)
                )
                category_rows = await session.execute(
                    select(CautionItem.category, func.count())
                    .where(*conditions)
                    .group_by(CautionItem.category)
                )
                recent_count = await session.scalar(
                    select(func.count())
                    .select_from(CautionItem)
                    .where(*conditions, CautionItem.published_date >= recent_since)
                )
                total_active = await session.scalar(
                    select(func.count()).select_from(CautionItem).where(*conditions)
                )
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to compute persona stats: {e}", operation="select"
            ) from e

        return PersonaStats(
            by_severity={severity.value: count for severity, count in severity_rows.all()},
            by_category={category.value: count for category, count in category_rows.all()},
            recent_count=recent_count or 0,
            total_active=total_active or 0,
        )

    async def increment_view_count(self, item_id: uuid.UUID) -> None:
        """Increment an item's view counter.

        Args:
            item_id: Item UUID

        Raises:
            RecordNotFoundError: If no such item exists
            StoreUnavailableError: If the update fails
        """
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(
                    update(CautionItem)
                    .where(CautionItem.id == item_id)
                    .values(view_count=CautionItem.view_count + 1)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to increment view count: {e}", operation="update"
            ) from e

        if not result.rowcount:
            raise RecordNotFoundError(model="CautionItem", record_id=str(item_id))

    async def get_item(self, item_id: uuid.UUID) -> CautionItemView:
        """Get one item by id, active or not.

        Args:
            item_id: Item UUID

        Returns:
            CautionItemView

        Raises:
            RecordNotFoundError: If no such item exists
            StoreUnavailableError: If the store cannot be queried
        """
        try:
            async with self.db_session_factory() as session:
                item = await session.get(CautionItem, item_id)
                view = to_view(item) if item is not None else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to load caution item: {e}", operation="select"
            ) from e

        if view is None:
            raise RecordNotFoundError(model="CautionItem", record_id=str(item_id))
        return view

    async def list_categories(self) -> list[CautionCategory]:
        """List distinct categories among active items.

        Returns:
            Categories in use, sorted by value

        Raises:
            StoreUnavailableError: If the store cannot be queried
        """
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(
                    select(CautionItem.category).where(CautionItem.is_active.is_(True)).distinct()
                )
                categories = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to list categories: {e}", operation="select"
            ) from e

        return sorted(categories, key=lambda category: category.value)

    async def set_item_active(self, item_id: uuid.UUID, active: bool) -> None:
        """Activate or deactivate an item on the read path.

        Args:
            item_id: Item UUID
            active: New active flag

        Raises:
            RecordNotFoundError: If no such item exists
            StoreUnavailableError: If the update fails
        """
        try:
            async with self.db_session_factory() as session:
                result = await session.execute(
                    update(CautionItem)
                    .where(CautionItem.id == item_id)
                    .values(is_active=active)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to update caution item: {e}", operation="update"
            ) from e

        if not result.rowcount:
            raise RecordNotFoundError(model="CautionItem", record_id=str(item_id))
        logger.info("Caution item active flag changed", item_id=str(item_id), active=active)


__all__ = ["FeedReadStore", "RECENT_WINDOW", "to_view"]
