"""Feed source configuration models.

Defines the seed/admin shape of a feed source as read from
config/sources.yaml.
"""

from pydantic import BaseModel, Field, HttpUrl, field_validator

from caution_feed.models.source import (
    DEFAULT_POLL_INTERVAL_MS,
    MIN_POLL_INTERVAL_MS,
    CautionCategory,
)


class FeedSourceConfig(BaseModel):
    """Feed source seed entry.

    Attributes:
        name: Human-readable source name
        url: RSS/Atom feed URL (unique across sources)
        category: Topical category applied to ingested items
        personas: Persona identifiers the source is relevant to
        poll_interval_ms: Poll interval in milliseconds (>= 5 minutes)
        source_label: Display name used as item provenance
        active: Whether the scheduler polls this source
    """

    name: str = Field(min_length=1, max_length=200)
    url: HttpUrl
    category: CautionCategory
    personas: list[str] = Field(min_length=1)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, ge=MIN_POLL_INTERVAL_MS)
    source_label: str = Field(min_length=1, max_length=200)
    active: bool = True

    @field_validator("personas")
    @classmethod
    def dedupe_personas(cls, v: list[str]) -> list[str]:
        """Drop repeated personas while keeping order."""
        return list(dict.fromkeys(p.strip() for p in v if p.strip()))


class FeedSourceCatalog(BaseModel):
    """Top-level shape of config/sources.yaml.

    Attributes:
        sources: Feed source definitions
    """

    sources: list[FeedSourceConfig] = Field(default_factory=list)

    @field_validator("sources")
    @classmethod
    def unique_urls(cls, v: list[FeedSourceConfig]) -> list[FeedSourceConfig]:
        """Reject catalogs that list the same feed URL twice."""
        seen: set[str] = set()
        for source in v:
            url = str(source.url)
            if url in seen:
                raise ValueError(f"duplicate feed url: {url}")
            seen.add(url)
        return v


__all__ = [
    "FeedSourceConfig",
    "FeedSourceCatalog",
]
