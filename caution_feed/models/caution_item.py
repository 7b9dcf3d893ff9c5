"""Caution item ORM models.

This module defines ingested, classified caution items and the
persona labels attached to them.
"""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caution_feed.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin
from caution_feed.models.source import CautionCategory, enum_values

if TYPE_CHECKING:
    from caution_feed.models.source import FeedSource


class Severity(str, enum.Enum):
    """Criticality of a caution item, derived from its text."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CautionItemPersona(Base):
    """Persona label on a caution item.

    Labels are copied from the source at ingestion time and are not
    foreign keys to any persona definition.

    Attributes:
        caution_item_id: Owning item
        persona: Persona identifier
        position: Order of the persona on the source configuration
    """

    __tablename__ = "caution_item_personas"

    caution_item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("caution_items.id", ondelete="CASCADE"), primary_key=True
    )
    persona: Mapped[str] = mapped_column(String(50), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    item: Mapped["CautionItem"] = relationship("CautionItem", back_populates="persona_links")


class CautionItem(Base, UUIDMixin, TimestampMixin):
    """Ingested caution item.

    The (source_id, link) pair is unique and is the deduplication key
    for repeated polls of the same source.

    Attributes:
        source_id: Provenance source
        title: Entry title
        description: Short description/snippet
        content: Optional full body
        category: Category copied from the source
        severity: Computed severity
        published_date: Upstream publish time (or ingestion time)
        link: External link
        source_name: Source display label at ingestion time
        source_url: Source feed URL at ingestion time
        tags: Computed topic tags
        is_active: Visible on the read path
        view_count: Number of detail views
        persona_links: Persona labels
    """

    __tablename__ = "caution_items"
    __table_args__ = (
        UniqueConstraint("source_id", "link", name="uq_caution_items_source_link"),
        Index("ix_caution_items_published_id", "published_date", "id"),
        Index("ix_caution_items_category_active", "category", "is_active"),
    )

    source_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("feed_sources.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str | None] = mapped_column(Text)
    category: Mapped[CautionCategory] = mapped_column(
        Enum(CautionCategory, name="caution_category", values_callable=enum_values),
        nullable=False,
    )
    severity: Mapped[Severity] = mapped_column(
        Enum(Severity, name="caution_severity", values_callable=enum_values),
        nullable=False,
        default=Severity.MEDIUM,
        index=True,
    )
    published_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    link: Mapped[str] = mapped_column(String(2048), nullable=False)
    source_name: Mapped[str] = mapped_column(String(200), nullable=False)
    source_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    source: Mapped["FeedSource"] = relationship("FeedSource", back_populates="items")
    persona_links: Mapped[list[CautionItemPersona]] = relationship(
        CautionItemPersona,
        back_populates="item",
        cascade="all, delete-orphan",
        order_by=CautionItemPersona.position,
        lazy="selectin",
    )

    @property
    def personas(self) -> list[str]:
        """Persona identifiers in source order."""
        return [link.persona for link in self.persona_links]

    def set_personas(self, personas: list[str]) -> None:
        """Replace persona labels, keeping the given order.

        Args:
            personas: Persona identifiers
        """
        self.persona_links = [
            CautionItemPersona(persona=persona, position=index)
            for index, persona in enumerate(dict.fromkeys(personas))
        ]

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CautionItem(id={self.id}, severity={self.severity}, "
            f"title={self.title[:30]})>"
        )


__all__ = [
    "CautionItem",
    "CautionItemPersona",
    "Severity",
]
