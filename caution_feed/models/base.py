"""Base model mixins and utilities.

This module provides reusable mixins for common model patterns:
- UUIDMixin: UUID primary key
- TimestampMixin: created_at and updated_at fields
- UTCDateTime: timezone-aware datetime column that always loads as UTC
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, func
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator

from caution_feed.core.database import Base
from caution_feed.core.types import ensure_utc


class UTCDateTime(TypeDecorator[datetime]):
    """DateTime column normalized to aware UTC on the way in and out.

    SQLite drops tzinfo on storage, so values read back are naive; this
    type re-attaches UTC so comparisons against aware clocks stay valid.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        return ensure_utc(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        return ensure_utc(value)


class UUIDMixin:
    """Mixin for UUID primary key.

    Provides a UUID primary key field that is automatically generated.

    Example:
        >>> class Note(Base, UUIDMixin, TimestampMixin):
        ...     __tablename__ = "notes"
        ...     body: Mapped[str]
    """

    @declared_attr
    @classmethod
    def id(cls) -> Mapped[uuid.UUID]:
        """UUID primary key.

        Returns:
            UUID column mapped to primary key
        """
        return mapped_column(
            primary_key=True,
            default=uuid.uuid4,
            index=True,
        )


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    Provides automatic timestamp tracking for create and update operations.
    """

    @declared_attr
    @classmethod
    def created_at(cls) -> Mapped[datetime]:
        """Timestamp when record was created.

        Returns:
            DateTime column with default as current time
        """
        return mapped_column(
            UTCDateTime(),
            nullable=False,
            server_default=func.now(),
        )

    @declared_attr
    @classmethod
    def updated_at(cls) -> Mapped[datetime]:
        """Timestamp when record was last updated.

        Returns:
            DateTime column that updates automatically
        """
        return mapped_column(
            UTCDateTime(),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        )


__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "UTCDateTime",
]
