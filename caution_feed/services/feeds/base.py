"""DTOs shared across the caution feed pipeline.

This module defines the data structures passed between the registry,
fetcher, ingester, scheduler and read store.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from caution_feed.core.exceptions import ItemPersistError
from caution_feed.core.types import ensure_utc
from caution_feed.models.caution_item import Severity
from caution_feed.models.source import CautionCategory


class FeedSourceInfo(BaseModel):
    """Immutable snapshot of a feed source configuration.

    Taken when a source is handed to the pipeline, so items ingested in a
    cycle are tagged with the configuration as it was at that moment.

    Attributes:
        id: Source UUID
        name: Source name
        url: Feed URL
        category: Category copied to ingested items
        personas: Persona identifiers copied to ingested items
        poll_interval_ms: Poll interval
        is_active: Whether the source is polled
        last_fetched_at: Last attempted fetch
        source_label: Display label used as item provenance
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    name: str
    url: str
    category: CautionCategory
    personas: tuple[str, ...]
    poll_interval_ms: int
    is_active: bool = True
    last_fetched_at: datetime | None = None
    source_label: str

    @property
    def poll_interval(self) -> timedelta:
        """Poll interval as a timedelta."""
        return timedelta(milliseconds=self.poll_interval_ms)

    def is_due(self, now: datetime) -> bool:
        """Check whether the source should be polled at `now`.

        Args:
            now: Current time

        Returns:
            True if active and never fetched or the interval has elapsed
        """
        if not self.is_active:
            return False
        if self.last_fetched_at is None:
            return True
        return ensure_utc(now) - ensure_utc(self.last_fetched_at) >= self.poll_interval


class RawEntry(BaseModel):
    """Normalized feed entry produced by the fetcher.

    Attributes:
        title: Entry title
        summary: Plain-text summary/snippet
        content: Optional full body
        link: External link
        published_at: Upstream publish time, if present
    """

    title: str
    summary: str = ""
    content: str | None = None
    link: str
    published_at: datetime | None = None


@dataclass
class IngestResult:
    """Outcome of ingesting one source's batch.

    Attributes:
        source_id: Source the batch came from
        new_count: Items created
        duplicate_count: Entries already stored
        errors: Per-entry persist failures
    """

    source_id: uuid.UUID
    new_count: int = 0
    duplicate_count: int = 0
    errors: list[ItemPersistError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        """Number of entries that failed to persist."""
        return len(self.errors)


class SourceRunStatus(str, enum.Enum):
    """Terminal state of one source within a poll sweep."""

    INGESTED = "ingested"
    FAILED = "failed"
    IN_FLIGHT = "in_flight"


class SourceRunResult(BaseModel):
    """Per-source summary of a poll sweep.

    Attributes:
        source_id: Source UUID
        source_name: Source name
        status: Terminal state
        new_count: Items created
        duplicate_count: Entries already stored
        item_errors: Entries that failed to persist
        error: Fetch/ingest error message when status is FAILED
        duration_seconds: Time spent on the source
    """

    source_id: uuid.UUID
    source_name: str
    status: SourceRunStatus
    new_count: int = 0
    duplicate_count: int = 0
    item_errors: int = 0
    error: str | None = None
    duration_seconds: float = 0.0


class SweepReport(BaseModel):
    """Result of one poll sweep.

    Attributes:
        started_at: Sweep start time
        completed_at: Sweep completion time
        skipped: True if the registry could not be queried
        error: Registry error when skipped
        results: Per-source results
    """

    started_at: datetime
    completed_at: datetime | None = None
    skipped: bool = False
    error: str | None = None
    results: list[SourceRunResult] = Field(default_factory=list)

    @property
    def new_count(self) -> int:
        """Items created across all sources."""
        return sum(r.new_count for r in self.results)

    @property
    def failed(self) -> list[SourceRunResult]:
        """Sources whose fetch or ingest failed."""
        return [r for r in self.results if r.status == SourceRunStatus.FAILED]


class SourceRef(BaseModel):
    """Provenance of a caution item."""

    name: str
    url: str


class CautionItemView(BaseModel):
    """Caution item as returned to API consumers."""

    id: uuid.UUID
    title: str
    description: str
    category: CautionCategory
    severity: Severity
    personas: list[str]
    source: SourceRef
    published_date: datetime
    link: str
    tags: list[str]
    view_count: int


class CautionPage(BaseModel):
    """One page of a persona feed.

    Attributes:
        items: Items on this page, newest first
        total: Items matching the filters across all pages
    """

    items: list[CautionItemView]
    total: int


class PersonaStats(BaseModel):
    """Dashboard summary for one persona.

    Attributes:
        by_severity: Active item count per severity
        by_category: Active item count per category
        recent_count: Active items published in the last 7 days
        total_active: All active items for the persona
    """

    by_severity: dict[str, int]
    by_category: dict[str, int]
    recent_count: int
    total_active: int


__all__ = [
    "FeedSourceInfo",
    "RawEntry",
    "IngestResult",
    "SourceRunStatus",
    "SourceRunResult",
    "SweepReport",
    "SourceRef",
    "CautionItemView",
    "CautionPage",
    "PersonaStats",
]
