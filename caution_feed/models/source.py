"""Feed source ORM model.

This module defines the external RSS/Atom sources polled by the scheduler.
"""

import enum
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, CheckConstraint, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caution_feed.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin

if TYPE_CHECKING:
    from caution_feed.models.caution_item import CautionItem

# Hard floor for poll intervals (5 minutes)
MIN_POLL_INTERVAL_MS = 300_000
DEFAULT_POLL_INTERVAL_MS = 3_600_000


class CautionCategory(str, enum.Enum):
    """Topical category of a source and of the items ingested from it."""

    DATA_BREACH = "data-breach"
    PHISHING = "phishing"
    SOCIAL_MEDIA = "social-media"
    IDENTITY_THEFT = "identity-theft"
    ONLINE_SAFETY = "online-safety"
    FINANCIAL_FRAUD = "financial-fraud"
    PRIVACY_LAWS = "privacy-laws"
    DEVICE_SECURITY = "device-security"
    SCAMS = "scams"
    PARENTAL_CONTROLS = "parental-controls"
    GENERAL_SECURITY = "general-security"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Store enum values (not member names) in the database."""
    return [member.value for member in enum_cls]


class FeedSource(Base, UUIDMixin, TimestampMixin):
    """External feed polled for caution items.

    Attributes:
        name: Human-readable source name
        url: Feed URL (unique)
        category: Category applied to every item from this source
        personas: Ordered persona identifiers the source is relevant to
        poll_interval_ms: Minimum time between polls
        is_active: Whether the scheduler polls this source
        last_fetched_at: Last attempted fetch (advanced even on failure)
        source_label: Display name shown as item provenance
        items: Caution items ingested from this source
    """

    __tablename__ = "feed_sources"
    __table_args__ = (
        CheckConstraint(
            f"poll_interval_ms >= {MIN_POLL_INTERVAL_MS}", name="poll_interval_floor"
        ),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False, index=True)
    category: Mapped[CautionCategory] = mapped_column(
        Enum(CautionCategory, name="caution_category", values_callable=enum_values),
        nullable=False,
        index=True,
    )
    personas: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    poll_interval_ms: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_POLL_INTERVAL_MS
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_fetched_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    source_label: Mapped[str] = mapped_column(String(200), nullable=False)

    items: Mapped[list["CautionItem"]] = relationship(
        "CautionItem", back_populates="source", passive_deletes=True
    )

    @property
    def poll_interval(self) -> timedelta:
        """Poll interval as a timedelta."""
        return timedelta(milliseconds=self.poll_interval_ms)

    def __repr__(self) -> str:
        """String representation."""
        return f"<FeedSource(id={self.id}, name={self.name}, url={self.url})>"


__all__ = [
    "FeedSource",
    "CautionCategory",
    "MIN_POLL_INTERVAL_MS",
    "DEFAULT_POLL_INTERVAL_MS",
    "enum_values",
]
