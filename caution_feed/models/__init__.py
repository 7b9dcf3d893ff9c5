"""SQLAlchemy ORM models.

- FeedSource: configured external feeds
- CautionItem / CautionItemPersona: ingested items and their persona labels
"""

from caution_feed.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin
from caution_feed.models.caution_item import CautionItem, CautionItemPersona, Severity
from caution_feed.models.source import CautionCategory, FeedSource

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "UTCDateTime",
    "FeedSource",
    "CautionCategory",
    "CautionItem",
    "CautionItemPersona",
    "Severity",
]
